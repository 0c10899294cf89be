"""Markdown conversion of cleaned content subtrees."""

import re

import structlog
from markdownify import MarkdownConverter

from markharvest.core.harvesting.content_cleaner import CleanedDocument

logger = structlog.get_logger(__name__)


class HarvestMarkdownConverter(MarkdownConverter):
    """Markdown converter that keeps text and structure but drops link targets and media."""

    def convert_a(self, el, text, *args, **kwargs):
        """Render hyperlinks as their visible text only."""
        return text or ""

    def convert_img(self, el, text, *args, **kwargs):
        """Images have no textual representation."""
        return ""


_CONVERTER = HarvestMarkdownConverter(
    heading_style="ATX",
    bullets="-",
    strong_em_symbol="*",
    escape_underscores=False,
    escape_asterisks=False,
    strip=["script", "style"],
)

# Single-word lines that are navigation or metadata rather than content
NAVIGATION_TERMS = {
    "home",
    "about",
    "contact",
    "menu",
    "search",
    "login",
    "register",
    "subscribe",
    "share",
    "follow",
    "back",
    "next",
    "prev",
    "previous",
    "more",
    "advertisement",
    "ads",
    "sponsored",
    "cookie",
    "privacy",
    "terms",
    "navigation",
    "nav",
    "footer",
    "header",
    "sidebar",
}

_HTML_TAG = re.compile(r"</?[A-Za-z][^>]*>")
_MARKDOWN_LINK = re.compile(r"(?<!!)\[([^\]]+)\]\([^)]*\)")
_BARE_URL = re.compile(r"(?<![\w/])https?://\S+")
_TRAILING_SPACES = re.compile(r"[ \t]+$", re.MULTILINE)
_INLINE_SPACES = re.compile(r"(?<=\S)[ \t]{2,}(?=\S)")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_EMPTY_HEADING = re.compile(r"^#{1,6}[ \t]*$", re.MULTILINE)


def _keep_line(line: str) -> bool:
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return True
    if " " not in stripped and stripped.lower().strip(".:!|»") in NAVIGATION_TERMS:
        return False
    return True


def postprocess_markdown(markdown: str) -> str:
    """
    Normalize converter output.

    Removes residual HTML tags, link targets and bare URLs, single-word
    navigation lines, empty headings and runs of blank lines.

    Args:
        markdown: Raw converter output

    Returns:
        Normalized Markdown, stripped of leading/trailing whitespace
    """
    markdown = _HTML_TAG.sub("", markdown)
    markdown = _MARKDOWN_LINK.sub(r"\1", markdown)
    markdown = _BARE_URL.sub("", markdown)
    markdown = _INLINE_SPACES.sub(" ", markdown)
    markdown = _TRAILING_SPACES.sub("", markdown)
    markdown = "\n".join(line for line in markdown.split("\n") if _keep_line(line))
    markdown = _EMPTY_HEADING.sub("", markdown)
    markdown = _EXCESS_NEWLINES.sub("\n\n", markdown)
    return markdown.strip()


def to_markdown(cleaned: CleanedDocument) -> str:
    """
    Render a cleaned subtree as Markdown.

    Headings become ATX markers, emphasis and strong become inline markers,
    lists become "-" or numbered lines and blockquotes become ">" lines.
    Hyperlinks keep only their visible text.

    Args:
        cleaned: Cleaned content subtree

    Returns:
        Markdown string; empty string for an empty document
    """
    if cleaned.is_empty:
        return ""

    markdown = postprocess_markdown(_CONVERTER.convert_soup(cleaned.root))
    logger.debug("markdown_converted", tier=cleaned.tier.value, length=len(markdown))
    return markdown
