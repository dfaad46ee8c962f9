"""
Process-wide request admission for scraping.

Two tiers: a hard cap of ``max_requests`` admissions in any sliding window
of ``interval_ms``, and a soft per-request delay shaped by the request kind
(machine-like for API/feed/sitemap calls, human-like for page loads).
Callers await ``admission(kind)`` before every outbound request.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import random
import time
from collections import deque
from typing import TYPE_CHECKING, Awaitable, Callable

from .fingerprints import sample_delay

if TYPE_CHECKING:
    from ...config import ScraperConfig

logger = logging.getLogger("csnews.services.scraping.rate_limiter")

JITTER_SECONDS = 0.5
MIN_WAIT_SECONDS = 0.001


class RequestKind(str, enum.Enum):
    STANDARD = "standard"
    PAGE = "page"
    API = "api"
    FEED = "feed"
    SITEMAP = "sitemap"


# (min_ms, max_ms) shaping delays for kinds expected to look machine-driven
_MACHINE_DELAYS_MS: dict[RequestKind, tuple[int, int]] = {
    RequestKind.API: (50, 350),
    RequestKind.FEED: (100, 600),
    RequestKind.SITEMAP: (100, 600),
}


class IntervalRateLimiter:
    """Sliding-window admission gate with request-kind delay shaping."""

    def __init__(
        self,
        max_requests: int = 4,
        interval_ms: int = 60_000,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.interval = interval_ms / 1000.0
        self._clock = clock
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._admitted: deque[float] = deque()

    @classmethod
    def from_config(cls, cfg: ScraperConfig) -> IntervalRateLimiter:
        return cls(
            max_requests=cfg.max_requests_per_interval,
            interval_ms=cfg.request_interval_ms,
        )

    def _prune(self, now: float) -> None:
        while self._admitted and now - self._admitted[0] >= self.interval:
            self._admitted.popleft()

    @property
    def requests_in_interval(self) -> int:
        self._prune(self._clock())
        return len(self._admitted)

    @property
    def interval_start(self) -> float | None:
        """Timestamp of the oldest admission still inside the window."""
        self._prune(self._clock())
        return self._admitted[0] if self._admitted else None

    def _try_reserve(self) -> float | None:
        """Reserve a slot (None) or return the seconds until one frees up.

        Runs without suspension so concurrent callers cannot both take the
        last slot.
        """
        now = self._clock()
        self._prune(now)
        if len(self._admitted) < self.max_requests:
            self._admitted.append(now)
            return None
        return max(self._admitted[0] + self.interval - now, MIN_WAIT_SECONDS)

    def shaping_delay(self, kind: RequestKind | str) -> float:
        """Seconds of extra delay for a request of ``kind``."""
        try:
            kind = RequestKind(kind)
        except ValueError:
            kind = RequestKind.STANDARD
        bounds = _MACHINE_DELAYS_MS.get(kind)
        if bounds is not None:
            return self._rng.randint(*bounds) / 1000.0
        return sample_delay("pageLoad", self._rng) / 1000.0

    async def admission(self, kind: RequestKind | str = RequestKind.STANDARD) -> None:
        """Wait until the request may be sent."""
        first_wait = True
        while True:
            wait = self._try_reserve()
            if wait is None:
                break
            if first_wait:
                # +/- jitter on the first boundary wait only
                wait = max(wait + self._rng.uniform(-JITTER_SECONDS, JITTER_SECONDS), 0.0)
                logger.info(
                    "Rate limit reached (%d per %.0fs). Waiting %.1f seconds before next request",
                    self.max_requests, self.interval, wait,
                )
                first_wait = False
            await self._sleep(wait)

        delay = self.shaping_delay(kind)
        if delay > 0:
            await self._sleep(delay)
