"""
Exceptions raised by the scraping layer.

Every failure carries the URL and the session id it happened under so the
content pipeline can log and escalate to its next strategy.
"""

from __future__ import annotations

from typing import Optional


class ScrapeError(Exception):
    """Base exception for all scraping failures."""

    def __init__(self, message: str, *, url: str | None = None, session_id: str | None = None):
        self.url = url
        self.session_id = session_id
        super().__init__(message)


class DetectionError(ScrapeError):
    """The site identified and blocked the request (HTTP 403, challenge page)."""

    def __init__(
        self,
        url: str,
        *,
        status_code: int,
        block_type: str,
        session_id: str | None = None,
    ):
        self.status_code = status_code
        self.block_type = block_type
        super().__init__(
            f"Bot detection triggered for {url} ({block_type}, HTTP {status_code})",
            url=url,
            session_id=session_id,
        )


class FetchError(ScrapeError):
    """The site answered with a non-success status that is not a block."""

    def __init__(self, url: str, *, status_code: int, session_id: str | None = None):
        self.status_code = status_code
        super().__init__(f"HTTP {status_code} for {url}", url=url, session_id=session_id)


class TransportError(ScrapeError):
    """Timeout, DNS failure, connection reset or similar network error."""

    def __init__(self, url: str, cause: Exception, *, session_id: str | None = None):
        self.cause = cause
        super().__init__(
            f"Request to {url} failed: {type(cause).__name__}: {cause}",
            url=url,
            session_id=session_id,
        )


class ParseError(ScrapeError):
    """The response did not contain the expected structure."""

    def __init__(self, message: str, *, url: str | None = None, strategy: Optional[str] = None):
        self.strategy = strategy
        super().__init__(message, url=url)
