"""Immutable retrieval policy shared by every request of a harvest call."""

from dataclasses import dataclass, replace

# Redirects followed when a policy leaves max_redirects unset
DEFAULT_MAX_REDIRECTS = 2


@dataclass(frozen=True)
class RetrievalPolicy:
    """HTTP retrieval settings for one harvest call.

    Attributes:
        timeout_ms: Per-request timeout in milliseconds. None uses the transport default.
        max_redirects: Maximum redirects to follow. None means DEFAULT_MAX_REDIRECTS.
        persist_cookies: Keep cookies between requests of the same batch.
    """

    timeout_ms: int | None = None
    max_redirects: int | None = None
    persist_cookies: bool = False

    @staticmethod
    def builder() -> "RetrievalPolicyBuilder":
        """Start a fluent builder with every field unset."""
        return RetrievalPolicyBuilder()

    @property
    def timeout_seconds(self) -> float | None:
        """Timeout converted for httpx, or None when unset."""
        if self.timeout_ms is None:
            return None
        return self.timeout_ms / 1000

    @property
    def effective_max_redirects(self) -> int:
        """Redirect limit actually applied to the client."""
        if self.max_redirects is None:
            return DEFAULT_MAX_REDIRECTS
        return self.max_redirects


@dataclass(frozen=True)
class RetrievalPolicyBuilder:
    """Fluent builder for RetrievalPolicy.

    Each call returns a new builder, so a partially configured builder can be
    shared and extended without affecting other holders.

    Example:
        ```python
        policy = (
            RetrievalPolicy.builder()
            .timeout(30000)
            .max_redirects(3)
            .persist_cookies(True)
            .build()
        )
        ```
    """

    timeout_ms: int | None = None
    max_redirects_: int | None = None
    persist_cookies_: bool = False

    def timeout(self, ms: int) -> "RetrievalPolicyBuilder":
        if ms < 0:
            raise ValueError(f"timeout must be non-negative, got {ms}")
        return replace(self, timeout_ms=ms)

    def max_redirects(self, count: int) -> "RetrievalPolicyBuilder":
        if count < 0:
            raise ValueError(f"max_redirects must be non-negative, got {count}")
        return replace(self, max_redirects_=count)

    def persist_cookies(self, enabled: bool) -> "RetrievalPolicyBuilder":
        return replace(self, persist_cookies_=enabled)

    def build(self) -> RetrievalPolicy:
        return RetrievalPolicy(
            timeout_ms=self.timeout_ms,
            max_redirects=self.max_redirects_,
            persist_cookies=self.persist_cookies_,
        )
