"""Pytest configuration and fixtures."""

from collections.abc import Callable

import pytest

from markharvest.core.harvesting import RetrievalPolicy


def page(body: str, title: str = "Test Page") -> str:
    """Wrap body markup in a complete HTML document."""
    return (
        "<!DOCTYPE html><html><head>"
        f"<title>{title}</title>"
        "<script>window.analytics = {};</script>"
        "<style>body { color: black; }</style>"
        f"</head><body>{body}</body></html>"
    )


@pytest.fixture
def make_page() -> Callable[..., str]:
    """Provide the page() helper to tests."""
    return page


@pytest.fixture
def article_html() -> str:
    """Realistic article page with navigation, sidebar and footer around the article."""
    return page(
        '<header class="site-header"><a href="/">Home</a> <a href="/blog">Blog</a></header>'
        '<nav class="main-nav"><ul><li><a href="/news">News</a></li>'
        '<li><a href="/about">About us</a></li></ul></nav>'
        "<article>"
        "<h1>Understanding Concurrency</h1>"
        "<p>Concurrency lets a program make progress on several tasks at once.</p>"
        '<figure><img src="/diagram.png" alt="diagram">'
        "<figcaption>Photo: event loop diagram</figcaption></figure>"
        "<h2>Event loops</h2>"
        '<p>An <a href="https://example.org/loop">event loop</a> schedules '
        "<strong>cooperative</strong> tasks.</p>"
        '<div class="ad-slot">Buy our course today</div>'
        '<p><a href="/more">Read more</a></p>'
        "</article>"
        '<aside class="sidebar"><p>Related posts you may like</p></aside>'
        "<footer><p>Copyright 2024 Example Media</p></footer>"
    )


@pytest.fixture
def policy() -> RetrievalPolicy:
    """Retrieval policy used by network-facing tests."""
    return RetrievalPolicy.builder().timeout(5000).max_redirects(3).build()
