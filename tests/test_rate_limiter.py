"""
Unit tests for sliding-window admission and request-kind delay shaping.

A fake clock is advanced by the injected sleep so tests run instantly.
"""

import asyncio
import random

import pytest

from csnews.services.scraping.rate_limiter import IntervalRateLimiter, RequestKind


class FakeTime:
    """Monotonic clock plus an async sleep that advances it."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps: list[float] = []

    def clock(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake():
    return FakeTime()


def _limiter(fake, max_requests=4, interval_ms=60_000, seed=3) -> IntervalRateLimiter:
    return IntervalRateLimiter(
        max_requests,
        interval_ms,
        clock=fake.clock,
        sleep=fake.sleep,
        rng=random.Random(seed),
    )


class TestShapingDelay:
    def test_api_delay_range(self, fake):
        limiter = _limiter(fake)
        for _ in range(200):
            assert 0.05 <= limiter.shaping_delay(RequestKind.API) <= 0.35

    @pytest.mark.parametrize("kind", ["feed", "sitemap"])
    def test_feed_and_sitemap_delay_range(self, fake, kind):
        limiter = _limiter(fake)
        for _ in range(200):
            assert 0.1 <= limiter.shaping_delay(kind) <= 0.6

    @pytest.mark.parametrize("kind", ["page", "standard", "something-else"])
    def test_page_delay_uses_page_load_pattern(self, fake, kind):
        limiter = _limiter(fake)
        for _ in range(200):
            assert 0.8 <= limiter.shaping_delay(kind) <= 3.0


class TestAdmission:
    @pytest.mark.asyncio
    async def test_under_cap_only_shaping_delay(self, fake):
        limiter = _limiter(fake)
        await limiter.admission(RequestKind.API)

        assert len(fake.sleeps) == 1
        assert 0.05 <= fake.sleeps[0] <= 0.35
        assert limiter.requests_in_interval == 1

    @pytest.mark.asyncio
    async def test_saturated_interval_waits_for_boundary(self, fake):
        limiter = _limiter(fake, max_requests=2, interval_ms=10_000)
        await limiter.admission("api")
        await limiter.admission("api")
        first_admission = limiter.interval_start
        fake.sleeps.clear()

        await limiter.admission("api")

        # boundary wait (with up to 0.5 s jitter) followed by shaping delay
        assert len(fake.sleeps) >= 2
        assert fake.now >= first_admission + 10.0

    @pytest.mark.asyncio
    async def test_sliding_window_cap_holds(self, fake):
        max_requests, interval = 4, 60.0
        limiter = _limiter(fake, max_requests=max_requests, interval_ms=int(interval * 1000))

        admitted_at: list[float] = []
        for i in range(20):
            kind = "api" if i % 2 else "page"
            await limiter.admission(kind)
            admitted_at.append(limiter._admitted[-1])

        for i, start in enumerate(admitted_at):
            in_window = [t for t in admitted_at[i:] if t < start + interval]
            assert len(in_window) <= max_requests

    @pytest.mark.asyncio
    async def test_concurrent_callers_respect_cap(self, fake):
        limiter = _limiter(fake, max_requests=3, interval_ms=30_000)

        await asyncio.gather(*(limiter.admission("api") for _ in range(9)))

        stamps = sorted(limiter._admitted)
        assert len(stamps) <= 3
        assert fake.now >= 100.0 + 2 * 30.0 - 1.0

    @pytest.mark.asyncio
    async def test_jitter_never_makes_wait_negative(self, fake):
        limiter = _limiter(fake, max_requests=1, interval_ms=1000, seed=11)
        for _ in range(10):
            await limiter.admission("api")
        assert all(s >= 0 for s in fake.sleeps)


class TestConstruction:
    def test_from_config(self):
        class Cfg:
            max_requests_per_interval = 7
            request_interval_ms = 30_000

        limiter = IntervalRateLimiter.from_config(Cfg())
        assert limiter.max_requests == 7
        assert limiter.interval == 30.0

    def test_rejects_zero_cap(self):
        with pytest.raises(ValueError):
            IntervalRateLimiter(0)
