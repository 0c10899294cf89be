"""Harvest orchestrator - coordinates URL discovery, retrieval and conversion."""

import inspect
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import aclosing
from dataclasses import dataclass, field

import structlog

from markharvest.core.harvesting.content_cleaner import ContentCleaner
from markharvest.core.harvesting.content_extractor import ContentExtractor, parse_document
from markharvest.core.harvesting.content_fetcher import (
    ContentFetcher,
    FetchOutcome,
    FetchSuccess,
)
from markharvest.core.harvesting.markdown_converter import to_markdown
from markharvest.core.harvesting.retrieval_policy import RetrievalPolicy
from markharvest.core.harvesting.segmenter import MarkdownSegmenter, Segment
from markharvest.core.harvesting.url_extractor import extract_urls
from markharvest.utils.exceptions import SegmentationError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class HarvestedDocument:
    """Markdown harvested from one URL."""

    source: str
    markdown: str


@dataclass(frozen=True)
class SegmentedDocument:
    """Segments harvested from one URL.

    When segmentation parameters are invalid, segments is empty and error
    holds the diagnostic.
    """

    source: str
    segments: list[Segment] = field(default_factory=list)
    error: str | None = None

    @property
    def texts(self) -> list[str]:
        return [segment.text for segment in self.segments]


# Sinks receive None exactly once when the text contains no URL
DocumentSink = Callable[[HarvestedDocument | None], Awaitable[None] | None]
SegmentSink = Callable[[SegmentedDocument | None], Awaitable[None] | None]


async def _deliver(sink: Callable, item: object) -> None:
    result = sink(item)
    if inspect.isawaitable(result):
        await result


class MarkdownHarvester:
    """Coordinate the harvesting pipeline.

    Orchestrates all harvesting components per URL:
    - URL discovery in the input text
    - Retrieval (sequential or concurrent)
    - Main content selection
    - Cleaning
    - Markdown conversion
    - Segmentation (segmented modes)

    Holds no state between calls; failures of one URL never affect others.
    """

    def __init__(
        self,
        extractor: ContentExtractor | None = None,
        cleaner: ContentCleaner | None = None,
        fetcher_factory: Callable[[RetrievalPolicy], ContentFetcher] = ContentFetcher,
    ):
        """Initialize harvester with optional component overrides."""
        self.extractor = extractor or ContentExtractor()
        self.cleaner = cleaner or ContentCleaner()
        self.fetcher_factory = fetcher_factory

    def html_to_markdown(self, html: str | bytes) -> str:
        """
        Run extraction, cleaning and conversion on an HTML document.

        Args:
            html: Raw HTML, either decoded text or undecoded bytes whose
                encoding is detected from the markup

        Returns:
            Markdown of the main content; empty string when nothing usable remains
        """
        document = parse_document(html)
        candidate = self.extractor.select_main_content(document)
        cleaned = self.cleaner.clean(candidate)
        return to_markdown(cleaned)

    def _convert(self, outcome: FetchOutcome) -> HarvestedDocument | None:
        if not isinstance(outcome, FetchSuccess):
            return None

        # Without a charset header the page's own <meta charset> decides the decoding
        html = outcome.text if outcome.encoding else outcome.body
        try:
            markdown = self.html_to_markdown(html)
        except Exception as e:
            logger.warning(
                "conversion_failed", url=outcome.url, error=f"{type(e).__name__}: {e}"
            )
            return None

        if not markdown:
            logger.info("no_usable_content", url=outcome.url)
            return None
        return HarvestedDocument(source=outcome.url, markdown=markdown)

    def _segment(
        self, document: HarvestedDocument, target_size: int, overlap: int | None
    ) -> SegmentedDocument:
        try:
            segmenter = MarkdownSegmenter(target_size, overlap)
        except SegmentationError as e:
            logger.warning("segmentation_rejected", url=document.source, error=str(e))
            return SegmentedDocument(source=document.source, error=str(e))

        return SegmentedDocument(
            source=document.source, segments=segmenter.segment(document.markdown)
        )

    # Sequential modes

    def harvest(self, text: str, policy: RetrievalPolicy) -> list[HarvestedDocument]:
        """
        Harvest every URL in text, one after another.

        Args:
            text: Free-form text containing URLs
            policy: Retrieval policy for all requests

        Returns:
            Documents in URL submission order. URLs that fail to fetch or
            yield no content are absent.

        Example:
            ```python
            harvester = MarkdownHarvester()
            policy = RetrievalPolicy.builder().timeout(30000).build()
            for doc in harvester.harvest("Read https://example.com/post", policy):
                print(doc.source, doc.markdown)
            ```
        """
        urls = extract_urls(text)
        logger.info("harvest_started", mode="sequential", url_count=len(urls))
        if not urls:
            return []

        fetcher = self.fetcher_factory(policy)
        documents = []
        for _, outcome in fetcher.fetch_all(urls):
            document = self._convert(outcome)
            if document is not None:
                documents.append(document)

        logger.info("harvest_complete", requested=len(urls), produced=len(documents))
        return documents

    def harvest_segmented(
        self,
        text: str,
        policy: RetrievalPolicy,
        target_size: int,
        overlap: int | None = None,
    ) -> list[SegmentedDocument]:
        """
        Harvest sequentially and split each document into segments.

        Args:
            text: Free-form text containing URLs
            policy: Retrieval policy for all requests
            target_size: Maximum characters per segment
            overlap: Characters repeated between adjacent segments (optional)

        Returns:
            One SegmentedDocument per harvested URL, in submission order
        """
        return [
            self._segment(document, target_size, overlap)
            for document in self.harvest(text, policy)
        ]

    # Concurrent streaming modes

    async def stream(
        self, text: str, policy: RetrievalPolicy
    ) -> AsyncIterator[HarvestedDocument | None]:
        """
        Fetch all URLs concurrently and yield documents as they complete.

        Yields:
            HarvestedDocument per successful URL in completion order, or a
            single None when the text contains no URL
        """
        urls = extract_urls(text)
        logger.info("harvest_started", mode="concurrent", url_count=len(urls))
        if not urls:
            yield None
            return

        fetcher = self.fetcher_factory(policy)
        produced = 0
        async with aclosing(fetcher.iter_concurrent(urls)) as outcomes:
            async for outcome in outcomes:
                document = self._convert(outcome)
                if document is not None:
                    produced += 1
                    yield document

        logger.info("harvest_complete", requested=len(urls), produced=produced)

    async def stream_segmented(
        self,
        text: str,
        policy: RetrievalPolicy,
        target_size: int,
        overlap: int | None = None,
    ) -> AsyncIterator[SegmentedDocument | None]:
        """Concurrent counterpart of harvest_segmented, yielding in completion order."""
        async with aclosing(self.stream(text, policy)) as documents:
            async for document in documents:
                if document is None:
                    yield None
                else:
                    yield self._segment(document, target_size, overlap)

    async def harvest_streaming(
        self, text: str, policy: RetrievalPolicy, sink: DocumentSink
    ) -> None:
        """
        Harvest concurrently, pushing each document into sink when ready.

        Args:
            text: Free-form text containing URLs
            policy: Retrieval policy for all requests
            sink: Sync or async callable; receives None once when no URL was found

        Example:
            ```python
            async def on_document(doc):
                if doc is None:
                    print("no URLs")
                else:
                    print(doc.source)

            await MarkdownHarvester().harvest_streaming(text, policy, on_document)
            ```
        """
        async with aclosing(self.stream(text, policy)) as documents:
            async for document in documents:
                await _deliver(sink, document)

    async def harvest_segmented_streaming(
        self,
        text: str,
        policy: RetrievalPolicy,
        target_size: int,
        overlap: int | None,
        sink: SegmentSink,
    ) -> None:
        """Harvest concurrently, pushing each segmented document into sink when ready."""
        async with aclosing(
            self.stream_segmented(text, policy, target_size, overlap)
        ) as documents:
            async for document in documents:
                await _deliver(sink, document)
