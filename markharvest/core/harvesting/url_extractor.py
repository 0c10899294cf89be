"""URL discovery in free-form text."""

import re
from urllib.parse import urlsplit

import structlog

logger = structlog.get_logger(__name__)

_PATH_CHARS = r"A-Za-z0-9._~%+()!*,;:@=\-"

URL_PATTERN = re.compile(
    r"https?://"
    r"[A-Za-z0-9.\-]+(?::\d+)?"  # host and optional port
    rf"(?:/[{_PATH_CHARS}/]*)?"  # path, parentheses included
    rf"(?:\?[{_PATH_CHARS}/?&]*)?"  # query string
    rf"(?:#[{_PATH_CHARS}/?&]*)?",  # fragment
)

# Sentence punctuation that may trail a URL in prose
_TRAILING_PUNCTUATION = ".,;:!?]}'\""


def clean_url(url: str) -> str:
    """
    Strip sentence punctuation matched at the end of a URL.

    A trailing ")" is kept while it closes a "(" earlier in the URL, so
    ".../wiki/Foo_(bar)." becomes ".../wiki/Foo_(bar)".

    Args:
        url: Greedily matched URL candidate

    Returns:
        URL without trailing punctuation
    """
    while url:
        last = url[-1]
        if last == ")":
            if url.count(")") <= url.count("("):
                break
        elif last not in _TRAILING_PUNCTUATION:
            break
        url = url[:-1]
    return url


def _is_well_formed(url: str) -> bool:
    parts = urlsplit(url)
    host = parts.hostname or ""
    return parts.scheme in ("http", "https") and bool(host.strip("."))


def extract_urls(text: str) -> list[str]:
    """
    Find absolute http(s) URLs in text.

    Args:
        text: Arbitrary input text

    Returns:
        URLs in order of first appearance, each exact string listed once.
        Empty list when the text holds no URL.

    Example:
        ```python
        extract_urls("see https://en.wikipedia.org/wiki/Concurrency_(computer_science).")
        # ["https://en.wikipedia.org/wiki/Concurrency_(computer_science)"]
        ```
    """
    if not text:
        return []

    found: dict[str, None] = {}
    for match in URL_PATTERN.finditer(text):
        url = clean_url(match.group(0))
        if url and _is_well_formed(url):
            found.setdefault(url, None)

    urls = list(found)
    logger.debug("urls_extracted", url_count=len(urls))
    return urls
