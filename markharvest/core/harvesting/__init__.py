"""Content harvesting pipeline.

This module turns text containing hyperlinks into clean Markdown:
- URL discovery with trailing-punctuation cleanup
- Per-URL isolated retrieval, sequential or concurrent
- Priority cascade selection of the main content
- Cleaning of non-content elements and boilerplate
- Markdown conversion
- Boundary-aware segmentation with optional overlap
"""

from markharvest.core.harvesting.content_cleaner import CleanedDocument, ContentCleaner
from markharvest.core.harvesting.content_extractor import (
    ContentCandidate,
    ContentExtractor,
    SelectionTier,
)
from markharvest.core.harvesting.content_fetcher import (
    ContentFetcher,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
)
from markharvest.core.harvesting.harvester import (
    HarvestedDocument,
    MarkdownHarvester,
    SegmentedDocument,
)
from markharvest.core.harvesting.markdown_converter import to_markdown
from markharvest.core.harvesting.retrieval_policy import RetrievalPolicy
from markharvest.core.harvesting.segmenter import MarkdownSegmenter, Segment
from markharvest.core.harvesting.url_extractor import extract_urls
from markharvest.core.harvesting.user_agents import UserAgent, random_user_agent

__all__ = [
    "CleanedDocument",
    "ContentCleaner",
    "ContentCandidate",
    "ContentExtractor",
    "SelectionTier",
    "ContentFetcher",
    "FetchFailure",
    "FetchOutcome",
    "FetchSuccess",
    "HarvestedDocument",
    "MarkdownHarvester",
    "SegmentedDocument",
    "to_markdown",
    "RetrievalPolicy",
    "MarkdownSegmenter",
    "Segment",
    "extract_urls",
    "UserAgent",
    "random_user_agent",
]
