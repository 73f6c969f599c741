"""Event source failures. Caught per source by the orchestrator."""

from __future__ import annotations


class EventSourceError(Exception):
    """An upstream event API call failed."""

    def __init__(
        self,
        message: str,
        source: str,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.source = source
        self.status_code = status_code
        self.retryable = retryable


class EventSourceRateLimited(EventSourceError):
    """Upstream answered 429."""

    def __init__(self, source: str, retry_after_s: int | None = None) -> None:
        super().__init__(
            f"Rate limit exceeded for {source}",
            source=source,
            status_code=429,
            retryable=True,
        )
        self.retry_after_s = retry_after_s
