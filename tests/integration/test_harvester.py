"""Integration tests for the harvest pipeline across all four modes."""

from unittest.mock import patch

import httpx
import pytest
import respx

from markharvest.core.harvesting import (
    HarvestedDocument,
    MarkdownHarvester,
    RetrievalPolicy,
    SegmentedDocument,
)

FIRST = "https://first.example.com/article"
SECOND = "https://second.example.com/broken"
THIRD = "https://third.example.com/notes"
DEEPLY_NESTED = (
    "<html><body>" + "<div>" * 3000 + "buried text" + "</div>" * 3000 + "</body></html>"
)

TEXT = f"Sources: {FIRST}, {SECOND} and also {THIRD}."


@pytest.fixture
def harvester():
    return MarkdownHarvester()


@pytest.fixture
def mocked_sites(article_html, make_page):
    """Three sites where the second one cannot be reached."""
    with respx.mock:
        respx.get(FIRST).mock(return_value=httpx.Response(200, html=article_html))
        respx.get(SECOND).mock(side_effect=httpx.ConnectError("Name or service not known"))
        respx.get(THIRD).mock(
            return_value=httpx.Response(
                200,
                html=make_page(
                    '<nav><a href="/">Home</a></nav>'
                    '<div class="content"><h2>Field notes</h2>'
                    "<p>Notes taken while testing the harvester. They cover selection, "
                    "cleaning and conversion of pages.</p></div>"
                ),
            )
        )
        yield


class TestSequential:
    """Test sequential harvesting."""

    def test_failures_are_absent_and_order_is_kept(self, harvester, policy, mocked_sites):
        documents = harvester.harvest(TEXT, policy)

        assert [document.source for document in documents] == [FIRST, THIRD]
        assert documents[0].markdown.startswith("# Understanding Concurrency")
        assert "About us" not in documents[0].markdown
        assert "## Field notes" in documents[1].markdown
        assert "Home" not in documents[1].markdown

    def test_no_urls(self, harvester, policy):
        assert harvester.harvest("No links in this sentence.", policy) == []

    def test_duplicate_urls_fetched_once(self, harvester, policy, article_html):
        with respx.mock:
            route = respx.get(FIRST).mock(return_value=httpx.Response(200, html=article_html))

            documents = harvester.harvest(f"{FIRST} and again {FIRST}", policy)

        assert len(documents) == 1
        assert route.call_count == 1

    def test_page_without_content_is_absent(self, harvester, policy, make_page):
        with respx.mock:
            respx.get(FIRST).mock(
                return_value=httpx.Response(200, html=make_page("<nav>Menu only</nav>"))
            )

            assert harvester.harvest(FIRST, policy) == []

    def test_segmented(self, harvester, policy, mocked_sites):
        documents = harvester.harvest_segmented(TEXT, policy, target_size=80, overlap=10)

        assert [document.source for document in documents] == [FIRST, THIRD]
        for document in documents:
            assert document.error is None
            assert document.segments
            assert all(len(text) <= 80 for text in document.texts)

    def test_segmented_without_overlap_restores_markdown(self, harvester, policy, mocked_sites):
        documents = harvester.harvest(TEXT, policy)
        segmented = harvester.harvest_segmented(TEXT, policy, target_size=50)

        for document, pieces in zip(documents, segmented):
            assert "".join(pieces.texts) == document.markdown

    def test_segmented_invalid_overlap(self, harvester, policy, mocked_sites):
        """Test invalid parameters are reported per document without segments."""
        documents = harvester.harvest_segmented(TEXT, policy, target_size=50, overlap=50)

        assert [document.source for document in documents] == [FIRST, THIRD]
        for document in documents:
            assert document.segments == []
            assert "overlap" in document.error


class TestConcurrent:
    """Test concurrent streaming harvesting."""

    @pytest.mark.asyncio
    async def test_streaming_delivers_successes(self, harvester, policy, mocked_sites):
        delivered = []

        await harvester.harvest_streaming(TEXT, policy, delivered.append)

        assert sorted(document.source for document in delivered) == [FIRST, THIRD]
        assert all(isinstance(document, HarvestedDocument) for document in delivered)

    @pytest.mark.asyncio
    async def test_streaming_async_sink(self, harvester, policy, mocked_sites):
        delivered = []

        async def sink(document):
            delivered.append(document.source)

        await harvester.harvest_streaming(TEXT, policy, sink)

        assert sorted(delivered) == [FIRST, THIRD]

    @pytest.mark.asyncio
    async def test_streaming_no_urls_signals_once(self, harvester, policy):
        delivered = []

        await harvester.harvest_streaming("Nothing to fetch here.", policy, delivered.append)

        assert delivered == [None]

    @pytest.mark.asyncio
    async def test_segmented_streaming(self, harvester, policy, mocked_sites):
        delivered = []

        await harvester.harvest_segmented_streaming(TEXT, policy, 120, 20, delivered.append)

        assert sorted(document.source for document in delivered) == [FIRST, THIRD]
        for document in delivered:
            assert isinstance(document, SegmentedDocument)
            assert document.error is None
            assert all(len(text) <= 120 for text in document.texts)

    @pytest.mark.asyncio
    async def test_segmented_streaming_no_urls(self, harvester, policy):
        delivered = []

        await harvester.harvest_segmented_streaming("no links", policy, 120, None, delivered.append)

        assert delivered == [None]

    @pytest.mark.asyncio
    async def test_segmented_streaming_invalid_overlap(self, harvester, policy, mocked_sites):
        delivered = []

        await harvester.harvest_segmented_streaming(TEXT, policy, 20, 40, delivered.append)

        assert len(delivered) == 2
        assert all(document.error and not document.segments for document in delivered)

    @pytest.mark.asyncio
    async def test_stream_without_cookie_persistence(self, harvester, mocked_sites):
        policy = RetrievalPolicy.builder().persist_cookies(False).timeout(5000).build()

        documents = [document async for document in harvester.stream(TEXT, policy)]

        assert sorted(document.source for document in documents) == [FIRST, THIRD]


def test_html_to_markdown_cascade(harvester, make_page):
    """Test class selectors apply when semantic containers are missing."""
    html = make_page(
        '<div class="sidebar"><p>Trending now</p></div>'
        '<div class="entry"><h1>Entry title</h1><p>Entry body text.</p></div>'
    )

    markdown = harvester.html_to_markdown(html)

    assert markdown == "# Entry title\n\nEntry body text."


@pytest.fixture
def sites_with_unconvertible_page(article_html, make_page):
    """Two good sites around one whose markup is too deep to convert."""
    with respx.mock:
        respx.get(FIRST).mock(return_value=httpx.Response(200, html=article_html))
        respx.get(SECOND).mock(return_value=httpx.Response(200, html=DEEPLY_NESTED))
        respx.get(THIRD).mock(
            return_value=httpx.Response(
                200, html=make_page("<main><p>Third page body text.</p></main>")
            )
        )
        yield


class TestConversionIsolation:
    """Test a page that fails to convert never takes its siblings down."""

    def test_sequential(self, harvester, policy, sites_with_unconvertible_page):
        documents = harvester.harvest(TEXT, policy)

        assert [document.source for document in documents] == [FIRST, THIRD]

    def test_sequential_segmented(self, harvester, policy, sites_with_unconvertible_page):
        documents = harvester.harvest_segmented(TEXT, policy, target_size=100, overlap=10)

        assert [document.source for document in documents] == [FIRST, THIRD]

    @pytest.mark.asyncio
    async def test_streaming(self, harvester, policy, sites_with_unconvertible_page):
        delivered = []

        await harvester.harvest_streaming(TEXT, policy, delivered.append)

        assert sorted(document.source for document in delivered) == [FIRST, THIRD]

    @pytest.mark.asyncio
    async def test_segmented_streaming(self, harvester, policy, sites_with_unconvertible_page):
        delivered = []

        await harvester.harvest_segmented_streaming(TEXT, policy, 100, 10, delivered.append)

        assert sorted(document.source for document in delivered) == [FIRST, THIRD]

    def test_unexpected_error_is_contained(self, harvester, policy, mocked_sites):
        """Test any conversion error drops only the page that raised it."""
        convert = harvester.html_to_markdown

        def fail_on_notes(html):
            text = html.decode() if isinstance(html, bytes) else html
            if "Field notes" in text:
                raise ValueError("broken markup")
            return convert(html)

        with patch.object(harvester, "html_to_markdown", side_effect=fail_on_notes):
            documents = harvester.harvest(TEXT, policy)

        assert [document.source for document in documents] == [FIRST]


class TestDecoding:
    """Test pages are decoded with the charset they declare."""

    LATIN1_PAGE = (
        '<html><head><meta charset="iso-8859-1"></head>'
        "<body><article><p>Café crème à la française.</p></article></body></html>"
    ).encode("latin-1")

    def test_meta_charset_without_header_charset(self, harvester, policy):
        with respx.mock:
            respx.get(FIRST).mock(
                return_value=httpx.Response(
                    200, content=self.LATIN1_PAGE, headers={"Content-Type": "text/html"}
                )
            )

            documents = harvester.harvest(FIRST, policy)

        assert documents[0].markdown == "Café crème à la française."

    def test_header_charset_wins(self, harvester, policy):
        with respx.mock:
            respx.get(FIRST).mock(
                return_value=httpx.Response(
                    200,
                    content=self.LATIN1_PAGE,
                    headers={"Content-Type": "text/html; charset=iso-8859-1"},
                )
            )

            documents = harvester.harvest(FIRST, policy)

        assert "Café crème" in documents[0].markdown
