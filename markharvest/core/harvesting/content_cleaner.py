"""Content cleaning - strip non-content nodes and normalize text in place."""

import re
from dataclasses import dataclass

import structlog
from bs4 import Comment, NavigableString, Tag

from markharvest.core.harvesting.content_extractor import ContentCandidate, SelectionTier

logger = structlog.get_logger(__name__)


@dataclass
class CleanedDocument:
    """Content subtree after cleaning; still HTML-shaped."""

    root: Tag
    tier: SelectionTier
    removed_count: int = 0

    @property
    def is_empty(self) -> bool:
        """True when no usable text survived cleaning."""
        return not self.root.get_text(strip=True)


class ContentCleaner:
    """
    Remove non-content elements from a content candidate.

    This class handles:
    - Scripts, styles and other non-rendered markup
    - Images and embedded media, with their captions
    - Navigation, header, footer and complementary landmarks
    - Advertisement, social and cookie widgets (id/class heuristic)
    - Hidden elements and form controls
    - Standalone boilerplate text ("read more", "click here")
    - Whitespace normalization outside preformatted blocks
    """

    NON_RENDERED_TAGS = ["script", "style", "noscript", "template", "link", "meta"]

    MEDIA_TAGS = [
        "img",
        "picture",
        "source",
        "track",
        "svg",
        "canvas",
        "iframe",
        "frame",
        "frameset",
        "video",
        "audio",
        "embed",
        "object",
        "map",
    ]

    LANDMARK_TAGS = ["nav", "header", "footer", "aside"]

    LANDMARK_ROLES = ["navigation", "banner", "contentinfo", "complementary", "search"]

    FORM_CONTROL_TAGS = ["button", "input", "select", "textarea"]

    # Whole class/id tokens, so "header" or "read" do not match "ad"
    AD_NAME_PATTERN = re.compile(
        r"(?:^|[-_\s])(?:ad|ads|adv|advert|adverts|advertisement|advertising|adsense"
        r"|sponsor|sponsored|promo|promoted|banner|cookie|cookies|consent|gdpr"
        r"|newsletter|subscribe|social|share|sharing|related|recommended|comments?"
        r"|sidebar|menu|navbar|breadcrumbs?|popup|modal|avatar|wp-image)(?:$|[-_\s])",
        re.IGNORECASE,
    )

    HIDDEN_STYLE_PATTERN = re.compile(
        r"display\s*:\s*none|visibility\s*:\s*hidden", re.IGNORECASE
    )

    BOILERPLATE_PHRASES = {
        "advertisement",
        "sponsored",
        "sponsored content",
        "read more",
        "read more »",
        "continue reading",
        "click here",
        "see also",
        "share this",
        "share this article",
        "share",
        "subscribe",
        "subscribe now",
        "newsletter",
        "follow us",
        "related articles",
        "recommended",
        "cookie policy",
        "privacy policy",
        "terms of service",
        "skip to content",
        "back to top",
        "ver tópicos",
        "inscreva-se",
        "mantenha-se informado",
        "imagem do banner",
    }

    CREDIT_PATTERN = re.compile(
        r"^\s*(?:photo|foto|image|imagem|credit|crédito|créditos)\s*:",
        re.IGNORECASE,
    )

    # Elements dropped when cleaning leaves them without text
    PRUNABLE_WHEN_EMPTY = [
        "p",
        "span",
        "div",
        "section",
        "li",
        "ul",
        "ol",
        "a",
        "em",
        "strong",
        "b",
        "i",
        "figure",
        "blockquote",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
    ]

    PREFORMATTED_TAGS = ["pre", "code", "textarea"]

    def clean(self, candidate: ContentCandidate) -> CleanedDocument:
        """
        Clean a content candidate in place.

        Args:
            candidate: Subtree selected by the content extractor

        Returns:
            CleanedDocument wrapping the same (now cleaned) subtree. Never
            raises; a subtree with nothing left is reported via is_empty.
        """
        root = candidate.element
        removed = 0

        removed += self._remove_comments(root)
        removed += self._remove_media(root)
        removed += self._remove_all(root, root.find_all(self.NON_RENDERED_TAGS))
        removed += self._remove_all(root, root.find_all(self.LANDMARK_TAGS))
        removed += self._remove_all(root, root.find_all(attrs={"role": self.LANDMARK_ROLES}))
        removed += self._remove_all(root, root.find_all(self.FORM_CONTROL_TAGS))
        removed += self._remove_all(root, self._find_hidden(root))
        removed += self._remove_all(root, self._find_ad_like(root))
        removed += self._remove_boilerplate_text(root)
        self._normalize_whitespace(root)
        removed += self._prune_empty(root)

        document = CleanedDocument(root=root, tier=candidate.tier, removed_count=removed)
        logger.debug(
            "content_cleaned",
            tier=candidate.tier.value,
            removed_nodes=removed,
            is_empty=document.is_empty,
        )
        return document

    def _remove_all(self, root: Tag, elements: list[Tag]) -> int:
        count = 0
        for element in elements:
            # Already gone together with a removed ancestor
            if element.decomposed or element is root:
                continue
            element.decompose()
            count += 1
        return count

    def _remove_comments(self, root: Tag) -> int:
        comments = root.find_all(string=lambda s: isinstance(s, Comment))
        for comment in comments:
            comment.extract()
        return len(comments)

    def _remove_media(self, root: Tag) -> int:
        """Remove media elements together with the figure and caption around them."""
        targets: list[Tag] = []
        for media in root.find_all(self.MEDIA_TAGS):
            figure = media.find_parent("figure")
            targets.append(figure if figure is not None else media)
        targets.extend(root.find_all("figcaption"))
        return self._remove_all(root, targets)

    def _find_hidden(self, root: Tag) -> list[Tag]:
        hidden = []
        for element in root.find_all(True):
            if element.has_attr("hidden") or element.get("aria-hidden") == "true":
                hidden.append(element)
            elif self.HIDDEN_STYLE_PATTERN.search(element.get("style", "")):
                hidden.append(element)
        return hidden

    def _find_ad_like(self, root: Tag) -> list[Tag]:
        ad_like = []
        for element in root.find_all(True):
            if element.decomposed:
                continue
            classes = element.get("class") or []
            names = " ".join(classes) + " " + (element.get("id") or "")
            if any(self.AD_NAME_PATTERN.search(name) for name in names.split()):
                ad_like.append(element)
        return ad_like

    def _is_boilerplate(self, text: str) -> bool:
        normalized = re.sub(r"\s+", " ", text).strip().lower().rstrip(".:!…>»→ ")
        if not normalized:
            return False
        return normalized in self.BOILERPLATE_PHRASES or bool(
            self.CREDIT_PATTERN.match(normalized)
        )

    def _remove_boilerplate_text(self, root: Tag) -> int:
        """Remove text nodes that consist solely of a boilerplate phrase."""
        count = 0
        for string in root.find_all(string=True):
            if isinstance(string, Comment) or not self._is_boilerplate(string):
                continue
            parent = string.parent
            string.extract()
            count += 1
            # Drop a wrapper such as <a>Read more</a> left without text
            if (
                parent is not None
                and parent is not root
                and parent.name in self.PRUNABLE_WHEN_EMPTY
                and not parent.get_text(strip=True)
            ):
                parent.decompose()
        return count

    def _normalize_whitespace(self, root: Tag) -> None:
        """Collapse whitespace runs, including newlines, to single spaces."""
        for string in root.find_all(string=True):
            if not isinstance(string, NavigableString) or isinstance(string, Comment):
                continue
            if string.find_parent(self.PREFORMATTED_TAGS) is not None:
                continue
            collapsed = re.sub(r"\s+", " ", str(string))
            if collapsed != string:
                string.replace_with(collapsed)

    def _prune_empty(self, root: Tag) -> int:
        count = 0
        # Deepest first so emptied parents are caught in the same pass
        for element in reversed(root.find_all(self.PRUNABLE_WHEN_EMPTY)):
            if element.decomposed or element is root:
                continue
            if not element.get_text(strip=True) and not element.find(["br", "hr", "table"]):
                element.decompose()
                count += 1
        return count
