"""Markdown segmentation with boundary-aware splitting and optional overlap."""

import re
from dataclasses import dataclass

import structlog

from markharvest.utils.exceptions import SegmentationError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Segment:
    """
    One bounded piece of a Markdown document.

    Attributes:
        text: Segment text, including the overlap prefix
        sequence: Order of the segment within its document (1, 2, 3...)
        start_position: Start of the new (non-overlap) content in the source
        end_position: End of the new content in the source
        overlap_length: Length of the prefix repeated from the previous segment
    """

    text: str
    sequence: int
    start_position: int
    end_position: int
    overlap_length: int = 0

    @property
    def overlap_text(self) -> str:
        return self.text[: self.overlap_length]


# Boundary finders, strongest first. Each yields offsets where a piece may
# start, i.e. the position right after the boundary.
_HEADING_START = re.compile(r"(?:^|\n)(?=#{1,6} )")
_PARAGRAPH_START = re.compile(r"\n[ \t]*\n\s*")
_LINE_START = re.compile(r"\n")
_SENTENCE_START = re.compile(r"[.!?][\"')\]]*\s+")
_WORD_START = re.compile(r"\s+")

BOUNDARY_LEVELS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("heading", _HEADING_START),
    ("paragraph", _PARAGRAPH_START),
    ("line", _LINE_START),
    ("sentence", _SENTENCE_START),
    ("word", _WORD_START),
)


def _boundaries(text: str, pattern: re.Pattern[str]) -> list[int]:
    return [match.end() for match in pattern.finditer(text)]


def validate_parameters(target_size: int, overlap: int | None) -> int:
    """
    Check segmentation parameters before any splitting.

    Args:
        target_size: Maximum characters per segment
        overlap: Characters repeated between adjacent segments (optional)

    Returns:
        Effective overlap (0 when unset)

    Raises:
        SegmentationError: If target_size <= 0, overlap < 0 or overlap >= target_size
    """
    if target_size <= 0:
        raise SegmentationError(f"target_size must be positive, got {target_size}")
    if overlap is None:
        return 0
    if overlap < 0:
        raise SegmentationError(f"overlap must not be negative, got {overlap}")
    if overlap >= target_size:
        raise SegmentationError(
            f"overlap ({overlap}) must be smaller than target_size ({target_size})"
        )
    return overlap


class MarkdownSegmenter:
    """
    Split Markdown into bounded, context-preserving segments.

    Cuts prefer heading boundaries, then paragraphs, lines, sentences and
    words; a raw character cut is used only when nothing else fits. A heading
    is therefore kept with the paragraph that follows it whenever both fit.

    With overlap, every segment after the first starts with a suffix of the
    previous segment (at most `overlap` characters, aligned to the same
    boundaries). Segments never exceed target_size, prefix included. Without
    overlap, the segments concatenate back to the input exactly.
    """

    def __init__(self, target_size: int, overlap: int | None = None) -> None:
        """
        Initialize segmenter.

        Args:
            target_size: Maximum characters per segment
            overlap: Characters of context repeated between segments (optional)

        Raises:
            SegmentationError: If the parameters are inconsistent
        """
        self.overlap = validate_parameters(target_size, overlap)
        self.target_size = target_size

    def segment(self, markdown: str) -> list[Segment]:
        """
        Segment a Markdown document.

        Args:
            markdown: Converted document

        Returns:
            Ordered segments; empty list for empty or whitespace-only input
        """
        if not markdown or not markdown.strip():
            return []

        segments: list[Segment] = []
        position = 0
        previous_text = ""

        while position < len(markdown):
            prefix = self._overlap_prefix(previous_text) if segments else ""
            available = self.target_size - len(prefix)
            end = self._find_cut(markdown, position, available)
            text = prefix + markdown[position:end]

            segments.append(
                Segment(
                    text=text,
                    sequence=len(segments) + 1,
                    start_position=position,
                    end_position=end,
                    overlap_length=len(prefix),
                )
            )
            previous_text = text
            position = end

        logger.debug(
            "segmentation_complete",
            segment_count=len(segments),
            target_size=self.target_size,
            overlap=self.overlap,
            document_length=len(markdown),
        )
        return segments

    def _find_cut(self, text: str, start: int, available: int) -> int:
        """Return the end offset of the piece starting at `start`."""
        limit = start + available
        if limit >= len(text):
            return len(text)

        window = text[start:limit + 1]
        for _, pattern in BOUNDARY_LEVELS:
            # A boundary right at the limit still fits
            candidates = [b for b in _boundaries(window, pattern) if 0 < b <= available]
            if candidates:
                return start + max(candidates)

        return limit

    def _overlap_prefix(self, previous: str) -> str:
        """Longest boundary-aligned suffix of `previous` within the overlap."""
        if self.overlap == 0:
            return ""

        earliest = max(len(previous) - self.overlap, 0)
        for _, pattern in BOUNDARY_LEVELS:
            candidates = [
                b
                for b in _boundaries(previous, pattern)
                if earliest <= b < len(previous) and previous[b:].strip()
            ]
            if candidates:
                return previous[min(candidates):]

        return previous[earliest:]
