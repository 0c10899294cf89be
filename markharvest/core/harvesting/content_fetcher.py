"""Content fetcher - retrieve raw documents for discovered URLs.

Every URL is fetched in isolation: a timeout, DNS error, reset connection or
non-2xx status produces a FetchFailure for that URL and never affects its
siblings in the same batch.
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from contextlib import aclosing
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from markharvest.core.harvesting.retrieval_policy import RetrievalPolicy
from markharvest.core.harvesting.user_agents import random_user_agent
from markharvest.utils.exceptions import FetchError

logger = structlog.get_logger(__name__)

# Sent with every request next to a randomly chosen User-Agent
BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "DNT": "1",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
}


@dataclass(frozen=True)
class FetchSuccess:
    """Raw response body of a successful retrieval."""

    url: str
    body: bytes
    content_type: str = ""
    encoding: str | None = None
    status_code: int = 200

    @property
    def text(self) -> str:
        """Body decoded with the response charset (UTF-8 when unknown)."""
        return self.body.decode(self.encoding or "utf-8", errors="replace")


@dataclass(frozen=True)
class FetchFailure:
    """Reason a URL produced no document."""

    url: str
    reason: str


FetchOutcome = FetchSuccess | FetchFailure

OutcomeSink = Callable[[FetchOutcome], Awaitable[None] | None]


def _request_headers() -> dict[str, str]:
    headers = dict(BROWSER_HEADERS)
    headers["User-Agent"] = str(random_user_agent())
    return headers


def _client_options(policy: RetrievalPolicy) -> dict[str, Any]:
    options: dict[str, Any] = {
        "follow_redirects": True,
        "max_redirects": policy.effective_max_redirects,
    }
    # Leaving timeout out keeps the httpx default
    if policy.timeout_seconds is not None:
        options["timeout"] = policy.timeout_seconds
    return options


def _to_outcome(url: str, response: httpx.Response) -> FetchSuccess:
    """Convert a response into FetchSuccess, raising FetchError on non-2xx."""
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise FetchError(url, f"HTTP {response.status_code}") from e

    return FetchSuccess(
        url=url,
        body=response.content,
        content_type=response.headers.get("content-type", ""),
        encoding=response.charset_encoding,
        status_code=response.status_code,
    )


def _describe(error: Exception) -> str:
    message = str(error)
    return f"{type(error).__name__}: {message}" if message else type(error).__name__


async def _cancel_pending(tasks: list[asyncio.Task]) -> None:
    """Cancel requests still in flight when the consumer stops early."""
    pending = [task for task in tasks if not task.done()]
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.wait(pending)


class ContentFetcher:
    """Fetch raw documents under a RetrievalPolicy.

    Offers a blocking contract (fetch, fetch_all) and an asyncio one
    (afetch, fetch_all_concurrent, iter_concurrent). Each request carries
    its own randomly chosen User-Agent.
    """

    def __init__(
        self,
        policy: RetrievalPolicy | None = None,
        transport: httpx.BaseTransport | None = None,
        async_transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize fetcher.

        Args:
            policy: Retrieval policy applied to every request
            transport: Optional httpx transport for the blocking client
            async_transport: Optional httpx transport for the async client
        """
        self.policy = policy or RetrievalPolicy()
        self._transport = transport
        self._async_transport = async_transport

    def _client(self) -> httpx.Client:
        return httpx.Client(transport=self._transport, **_client_options(self.policy))

    def _async_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self._async_transport, **_client_options(self.policy)
        )

    # Blocking contract

    def fetch(self, url: str) -> FetchOutcome:
        """Fetch a single URL with a dedicated client."""
        with self._client() as client:
            return self._fetch_with(client, url)

    def fetch_all(self, urls: Iterable[str]) -> list[tuple[str, FetchOutcome]]:
        """
        Fetch URLs one after another, in submission order.

        Args:
            urls: URLs to retrieve

        Returns:
            One (url, outcome) pair per URL, in the order given
        """
        results: list[tuple[str, FetchOutcome]] = []
        with self._client() as client:
            for url in urls:
                results.append((url, self._fetch_with(client, url)))
        return results

    def _fetch_with(self, client: httpx.Client, url: str) -> FetchOutcome:
        try:
            try:
                response = client.get(url, headers=_request_headers())
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise FetchError(url, _describe(e)) from e
            finally:
                if not self.policy.persist_cookies:
                    client.cookies.clear()
            outcome = _to_outcome(url, response)
        except FetchError as e:
            logger.warning("fetch_failed", url=url, reason=e.reason)
            return FetchFailure(url=url, reason=e.reason)

        logger.debug(
            "fetch_succeeded",
            url=url,
            status_code=outcome.status_code,
            bytes=len(outcome.body),
        )
        return outcome

    # Asyncio contract

    async def afetch(self, url: str) -> FetchOutcome:
        """Fetch a single URL without blocking the event loop."""
        async with self._async_client() as client:
            return await self._afetch_with(client, url)

    async def iter_concurrent(self, urls: Iterable[str]) -> AsyncIterator[FetchOutcome]:
        """
        Issue all requests at once and yield outcomes as they complete.

        Args:
            urls: URLs to retrieve

        Yields:
            FetchOutcome per URL, in completion order (not submission order)
        """
        url_list = list(urls)
        if not url_list:
            return

        # Without cookie persistence every request gets its own client so
        # concurrent responses cannot leak cookies into each other
        if self.policy.persist_cookies:
            async with self._async_client() as client:
                tasks = [
                    asyncio.create_task(self._afetch_with(client, url)) for url in url_list
                ]
                try:
                    for next_done in asyncio.as_completed(tasks):
                        yield await next_done
                finally:
                    await _cancel_pending(tasks)
        else:
            tasks = [asyncio.create_task(self.afetch(url)) for url in url_list]
            try:
                for next_done in asyncio.as_completed(tasks):
                    yield await next_done
            finally:
                await _cancel_pending(tasks)

    async def fetch_all_concurrent(
        self, urls: Iterable[str], sink: OutcomeSink | None = None
    ) -> list[tuple[str, FetchOutcome]]:
        """
        Fetch URLs concurrently, streaming each outcome to sink when it arrives.

        Args:
            urls: URLs to retrieve
            sink: Optional callable (sync or async) invoked once per outcome

        Returns:
            All (url, outcome) pairs, in completion order
        """
        results: list[tuple[str, FetchOutcome]] = []
        async with aclosing(self.iter_concurrent(urls)) as outcomes:
            async for outcome in outcomes:
                results.append((outcome.url, outcome))
                if sink is not None:
                    delivered = sink(outcome)
                    if delivered is not None:
                        await delivered
        return results

    async def _afetch_with(self, client: httpx.AsyncClient, url: str) -> FetchOutcome:
        try:
            try:
                response = await client.get(url, headers=_request_headers())
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                raise FetchError(url, _describe(e)) from e
            outcome = _to_outcome(url, response)
        except FetchError as e:
            logger.warning("fetch_failed", url=url, reason=e.reason)
            return FetchFailure(url=url, reason=e.reason)

        logger.debug(
            "fetch_succeeded",
            url=url,
            status_code=outcome.status_code,
            bytes=len(outcome.body),
        )
        return outcome
