"""Content extraction module - select the main content subtree of a page."""

from dataclasses import dataclass
from enum import Enum

import structlog
from bs4 import BeautifulSoup, Tag

logger = structlog.get_logger(__name__)


class SelectionTier(str, Enum):
    """Cascade tier that produced a content candidate."""

    SEMANTIC = "semantic"
    CLASS_SELECTOR = "class_selector"
    BODY_FALLBACK = "body_fallback"


@dataclass(frozen=True)
class SelectorStrategy:
    """One ranked CSS selector in the extraction cascade."""

    tier: SelectionTier
    selector: str


# Evaluated in order; the first strategy with a non-empty match wins
SELECTOR_CASCADE: tuple[SelectorStrategy, ...] = (
    SelectorStrategy(SelectionTier.SEMANTIC, "article"),
    SelectorStrategy(SelectionTier.SEMANTIC, "main"),
    SelectorStrategy(SelectionTier.SEMANTIC, "[role='main']"),
    SelectorStrategy(SelectionTier.CLASS_SELECTOR, ".content"),
    SelectorStrategy(SelectionTier.CLASS_SELECTOR, ".article"),
    SelectorStrategy(SelectionTier.CLASS_SELECTOR, ".post"),
    SelectorStrategy(SelectionTier.CLASS_SELECTOR, ".entry"),
    SelectorStrategy(SelectionTier.CLASS_SELECTOR, ".post-content"),
    SelectorStrategy(SelectionTier.CLASS_SELECTOR, ".entry-content"),
    SelectorStrategy(SelectionTier.CLASS_SELECTOR, ".article-content"),
    SelectorStrategy(SelectionTier.CLASS_SELECTOR, ".article-body"),
)


@dataclass
class ContentCandidate:
    """Subtree chosen as the primary content of a document."""

    element: Tag
    tier: SelectionTier
    selector: str | None = None


def parse_document(html: str | bytes) -> BeautifulSoup:
    """Parse raw HTML (or any text) into a document tree; bytes are decoded by bs4."""
    return BeautifulSoup(html, "html.parser")


class ContentExtractor:
    """Select the narrowest meaningful content container of a page.

    Uses a priority cascade approach:
    1. Semantic containers (article, main, role="main")
    2. Class-name heuristics (content, article, post, entry)
    3. The body element (never fails)

    Within a strategy the first match in document order is used; matches are
    not ranked by size.
    """

    def __init__(self, cascade: tuple[SelectorStrategy, ...] = SELECTOR_CASCADE):
        """Initialize content extractor with an ordered selector cascade."""
        self.cascade = cascade

    def select_main_content(self, document: BeautifulSoup) -> ContentCandidate:
        """
        Run the selector cascade against a parsed document.

        Args:
            document: Parsed HTML document

        Returns:
            ContentCandidate from the first tier with a non-empty match,
            falling back to the body (or the whole document when it has none)
        """
        for strategy in self.cascade:
            element = self._first_non_empty(document, strategy.selector)
            if element is not None:
                logger.debug(
                    "content_selected", tier=strategy.tier.value, selector=strategy.selector
                )
                return ContentCandidate(
                    element=element, tier=strategy.tier, selector=strategy.selector
                )

        body = document.body
        logger.debug("content_selected", tier=SelectionTier.BODY_FALLBACK.value)
        return ContentCandidate(
            element=body if body is not None else document,
            tier=SelectionTier.BODY_FALLBACK,
            selector="body" if body is not None else None,
        )

    def _first_non_empty(self, document: BeautifulSoup, selector: str) -> Tag | None:
        for element in document.select(selector):
            if element.get_text(strip=True):
                return element
        return None
