"""
Tests for the cache-backed fallback pipeline and the news service flow.

The end-to-end cases run the real client, strategies and file cache against
an in-process httpx transport.
"""

import json
import random
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from csnews.config import ScraperConfig, TournamentConfig
from csnews.services.content.pipeline import NEWS, TOURNAMENT, ContentPipeline
from csnews.services.content.service import ContentService
from csnews.services.content.strategies import StaticFallback
from csnews.services.scraping.client import AntiDetectionClient
from csnews.services.scraping.exceptions import DetectionError, ParseError, TransportError
from csnews.services.scraping.profiles import CRAWLER_PROFILES
from csnews.services.scraping.registry import SessionRegistry
from csnews.storage.cache import JsonFileCache
from csnews.storage.models import NewsArticle

MINUTE_MS = 60 * 1000


class FakeClock:
    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now


class FakeStrategy:
    """Strategy double: returns ``result`` or raises ``error``."""

    def __init__(self, name, result=None, *, error=None, placeholder=False):
        self.name = name
        self.placeholder = placeholder
        self._result = result
        self._error = error
        self.calls = 0

    async def attempt(self):
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._result


def _article(n: int, article_type: str = "standard") -> NewsArticle:
    return NewsArticle(
        title=f"Headline {n}",
        url=f"https://www.hltv.org/news/{n}/headline",
        time="1:00:00 PM",
        type=article_type,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(tmp_path, clock):
    return JsonFileCache(tmp_path, {"news": 1.0, "tournament": 6.0}, clock=clock)


# ---------------------------------------------------------------------------
# Pipeline with synthetic strategies
# ---------------------------------------------------------------------------


class TestFallbackOrder:
    @pytest.mark.asyncio
    async def test_first_non_empty_strategy_wins(self, cache):
        first = FakeStrategy("homepage", [])
        second = FakeStrategy("rss", [_article(1)])
        third = FakeStrategy("sitemap", [_article(2)])

        result = await ContentPipeline(cache).run(NEWS, [first, second, third])

        assert result.source == "rss"
        assert [a.title for a in result.records] == ["Headline 1"]
        assert not result.from_cache
        assert (first.calls, second.calls, third.calls) == (1, 1, 0)

    @pytest.mark.asyncio
    async def test_errors_escalate_to_next_strategy(self, cache):
        strategies = [
            FakeStrategy("homepage", error=DetectionError("https://x/", status_code=403, block_type="forbidden")),
            FakeStrategy("rss", error=TransportError("https://x/rss", TimeoutError("slow"))),
            FakeStrategy("sitemap", error=RuntimeError("parser bug")),
            FakeStrategy("newsapi", None),
            FakeStrategy("last", [_article(9)]),
        ]

        result = await ContentPipeline(cache).run(NEWS, strategies)

        assert result.source == "last"
        assert all(s.calls == 1 for s in strategies)

    @pytest.mark.asyncio
    async def test_exhaustion_raises_lookup_error(self, cache):
        with pytest.raises(LookupError):
            await ContentPipeline(cache).run(NEWS, [FakeStrategy("a", []), FakeStrategy("b", None)])


class TestCaching:
    @pytest.mark.asyncio
    async def test_success_is_written_to_cache(self, cache):
        await ContentPipeline(cache).run(NEWS, [FakeStrategy("homepage", [_article(1)])])

        stored = json.loads(cache.path_for("news").read_text())
        assert stored["data"] == [_article(1).to_dict()]

    @pytest.mark.asyncio
    async def test_placeholder_is_returned_but_not_cached(self, cache):
        fallback = StaticFallback("static", lambda: [_article(0)])

        result = await ContentPipeline(cache).run(NEWS, [FakeStrategy("homepage", []), fallback])

        assert result.placeholder
        assert result.source == "static"
        assert not cache.path_for("news").exists()

    @pytest.mark.asyncio
    async def test_fresh_cache_short_circuits_strategies(self, cache):
        pipeline = ContentPipeline(cache)
        await pipeline.run(NEWS, [FakeStrategy("homepage", [_article(1)])])

        untouched = FakeStrategy("homepage", [_article(2)])
        result = await pipeline.run(NEWS, [untouched])

        assert result.from_cache
        assert result.source == "cache"
        assert untouched.calls == 0
        assert result.records[0].from_cache

    @pytest.mark.asyncio
    async def test_use_cache_false_bypasses_read(self, cache):
        pipeline = ContentPipeline(cache)
        await pipeline.run(NEWS, [FakeStrategy("homepage", [_article(1)])])

        result = await pipeline.run(NEWS, [FakeStrategy("homepage", [_article(2)])], use_cache=False)
        assert result.records[0].title == "Headline 2"
        assert (await cache.get("news"))[0]["title"] == "Headline 2"

    @pytest.mark.asyncio
    async def test_unreadable_cache_entry_is_a_miss(self, cache):
        cache.path_for("tournament").write_text(
            json.dumps({"timestamp": cache._clock(), "data": ["not", "a", "dict"]}),
        )
        result = await ContentPipeline(cache).run(TOURNAMENT, [FakeStrategy("events_page", ["IEM Cologne 2025"])])

        assert result.records == ["IEM Cologne 2025"]
        assert (await cache.get("tournament")) == {"name": "IEM Cologne 2025"}

    @pytest.mark.asyncio
    async def test_null_timestamp_falls_through_to_strategies(self, cache):
        cache.path_for("news").write_text(json.dumps({"timestamp": None, "data": []}))
        homepage = FakeStrategy("homepage", [_article(1)])

        result = await ContentPipeline(cache).run(NEWS, [homepage])

        assert result.source == "homepage"
        assert homepage.calls == 1
        assert (await cache.get("news"))[0]["title"] == "Headline 1"


# ---------------------------------------------------------------------------
# End to end through ContentService
# ---------------------------------------------------------------------------

HOMEPAGE = """
<html><body>
  <a class="standard-headline" href="/news/1/a"><h2>Vitality win the Major</h2><div class="time">1 hour ago</div></a>
  <a class="standard-headline" href="/news/2/b"><h2>NAVI sign new coach</h2><div class="time">3 hours ago</div></a>
  <div class="featured-news-container">
    <a class="featured-newslink" href="/news/3/c">
      <img src="https://img.hltv.org/c.jpg"><div class="featured-news-title">Inside the Major final</div>
    </a>
  </div>
</body></html>
"""


class Site:
    """MockTransport handler serving canned responses by path."""

    def __init__(self, pages=None, default_status=404):
        self.pages = pages or {}
        self.default_status = default_status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        page = self.pages.get(request.url.path)
        if page is None:
            return httpx.Response(self.default_status, text="")
        return httpx.Response(200, text=page)


def _service(site: Site, cache: JsonFileCache, **scraper) -> ContentService:
    limiter = MagicMock()
    limiter.admission = AsyncMock()
    client = AntiDetectionClient(
        registry=SessionRegistry(rng=random.Random(4)),
        rate_limiter=limiter,
        transport=httpx.MockTransport(site),
        sleep=AsyncMock(),
        rng=random.Random(4),
    )
    scraper.setdefault("newsapi_key", None)
    return ContentService(
        client,
        cache,
        scraper_cfg=ScraperConfig(**scraper),
        tournament_cfg=TournamentConfig(),
    )


class TestNewsEndToEnd:
    @pytest.mark.asyncio
    async def test_fresh_scrape_populates_cache(self, cache, clock):
        site = Site({"/": HOMEPAGE})
        service = _service(site, cache)

        articles = await service.get_latest_news()

        assert [a.type for a in articles] == ["standard", "standard", "featured"]
        assert not any(a.from_cache for a in articles)
        entry = json.loads(cache.path_for("news").read_text())
        assert entry["timestamp"] == clock.now
        assert entry["data"] == [a.to_dict() for a in articles]
        assert len(entry["data"]) == 3

    @pytest.mark.asyncio
    async def test_cache_within_ttl_avoids_network(self, cache, clock):
        stored = [_article(n).to_dict() for n in range(5)]
        cache.path_for("news").write_text(
            json.dumps({"timestamp": clock.now - 30 * MINUTE_MS, "data": stored}),
        )
        site = Site({"/": HOMEPAGE})
        service = _service(site, cache)

        articles = await service.get_latest_news()

        assert [a.to_dict() for a in articles] == stored
        assert all(a.from_cache for a in articles)
        assert site.requests == []

    @pytest.mark.asyncio
    async def test_repeat_call_is_identical_and_offline(self, cache):
        site = Site({"/": HOMEPAGE})
        service = _service(site, cache)

        first = await service.get_latest_news()
        calls_after_first = len(site.requests)
        second = await service.get_latest_news()

        assert [a.to_dict() for a in second] == [a.to_dict() for a in first]
        assert len(site.requests) == calls_after_first

    @pytest.mark.asyncio
    async def test_total_failure_yields_placeholder_without_cache_write(self, cache):
        site = Site(default_status=403)
        service = _service(site, cache, newsapi_key="test-key")

        articles = await service.get_latest_news()

        assert len(articles) == 2
        assert "Unable to fetch latest CS news" in articles[0].title
        assert not cache.path_for("news").exists()
        # homepage, rss, sitemap, newsapi
        assert len(site.requests) == 4

    @pytest.mark.asyncio
    async def test_feed_used_when_homepage_blocked(self, cache):
        rss = """<?xml version="1.0"?><rss version="2.0"><channel>
          <item><title>From the feed</title><link>https://www.hltv.org/news/7/feed</link></item>
        </channel></rss>"""
        site = Site({"/rss/news": rss}, default_status=403)
        service = _service(site, cache)

        articles = await service.get_latest_news()

        assert [a.title for a in articles] == ["From the feed"]
        crawler_agents = {p.user_agent for p in CRAWLER_PROFILES}
        assert site.requests[1].headers["user-agent"] in crawler_agents

    @pytest.mark.asyncio
    async def test_simulated_news_without_api_key_is_not_cached(self, cache):
        service = _service(Site(default_status=403), cache)

        articles = await service.get_latest_news()

        assert len(articles) == 5
        assert not cache.path_for("news").exists()


class TestMatchesAndTeams:
    @pytest.mark.asyncio
    async def test_matches_are_limited_but_fully_cached(self, cache):
        cards = "".join(
            f'<div class="upcomingMatch"><a class="match" href="/matches/{i}/m">'
            f'<div class="matchTeam"><div class="matchTeamName">A{i}</div></div>'
            f'<div class="matchTeam"><div class="matchTeamName">B{i}</div></div></a></div>'
            for i in range(8)
        )
        site = Site({"/matches": f'<div class="upcomingMatchesContainer">{cards}</div>'})
        service = _service(site, cache)

        matches = await service.get_upcoming_matches(limit=3)

        assert [m.team1 for m in matches] == ["A0", "A1", "A2"]
        assert len(await cache.get("matches")) == 8

    @pytest.mark.asyncio
    async def test_matches_placeholder(self, cache):
        matches = await _service(Site(default_status=500), cache).get_upcoming_matches()
        assert len(matches) == 1
        assert matches[0].team1 == "Unable to fetch matches"

    @pytest.mark.asyncio
    async def test_rankings_fall_back_to_undated_page(self, cache):
        rows = "".join(
            f'<div class="ranked-team"><span class="position">#{i}</span><span class="name">T{i}</span></div>'
            for i in range(1, 8)
        )
        site = Site({"/ranking/teams": rows})
        service = _service(site, cache)

        teams = await service.get_top_teams()

        assert [t.rank for t in teams] == ["1", "2", "3", "4", "5"]
        assert site.requests[0].url.path.startswith("/ranking/teams/")
        assert site.requests[1].url.path == "/ranking/teams"

    @pytest.mark.asyncio
    async def test_manual_ranking_update_writes_cache(self, cache):
        row = '<div class="ranked-team"><span class="position">#1</span><span class="name">Spirit</span></div>'
        site = Site({"/ranking/teams/2025/may/12": row})
        service = _service(site, cache)

        teams = await service.update_team_rankings("2025/may/12")

        assert [t.name for t in teams] == ["Spirit"]
        assert (await cache.get("teams"))[0]["name"] == "Spirit"

    @pytest.mark.asyncio
    async def test_manual_ranking_update_without_rows(self, cache):
        site = Site({"/ranking/teams/2025/may/12": "<div></div>"})
        with pytest.raises(ParseError):
            await _service(site, cache).update_team_rankings("2025/may/12")
        assert not cache.path_for("teams").exists()
