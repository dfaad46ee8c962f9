"""
Acquisition strategies for the content pipeline.

Each strategy implements the ContentStrategy protocol: ``attempt()`` returns
records, or an empty list / None when nothing usable was found, and may raise
any ScrapeError. Placeholder strategies never touch the network and their
results are never cached.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Callable, Optional, Protocol

from ...storage.models import Match, NewsArticle, TeamRanking
from ...utils.time import clock_label_from, format_clock, ranking_date_path
from ..scraping.client import AntiDetectionClient
from ..scraping.exceptions import ParseError
from ..scraping.rate_limiter import RequestKind
from .parsers import (
    parse_news_feed,
    parse_news_homepage,
    parse_news_sitemap,
    parse_rankings,
    parse_upcoming_matches,
)

logger = logging.getLogger("csnews.services.content.strategies")

FEED_SESSION = "feed_session"
SITEMAP_SESSION = "sitemap_session"
RANKINGS_SESSION = "rankings_session"
NEWSAPI_SESSION = "api_newsapi_session"


class ContentStrategy(Protocol):
    """Protocol for one way of obtaining a record set."""

    name: str
    placeholder: bool

    async def attempt(self) -> Optional[list]:
        """Fetch and parse; empty or None means escalate."""
        ...


class StaticFallback:
    """Fixed records returned when every other strategy failed."""

    placeholder = True

    def __init__(self, name: str, factory: Callable[[], list]) -> None:
        self.name = name
        self._factory = factory

    async def attempt(self) -> list:
        return self._factory()


# ---------------------------------------------------------------------------
# News
# ---------------------------------------------------------------------------


class NewsHomepageStrategy:
    """Headlines scraped from the site's front page."""

    name = "homepage"
    placeholder = False

    def __init__(self, client: AntiDetectionClient, base_url: str) -> None:
        self._client = client
        self._base_url = base_url

    async def attempt(self) -> list[NewsArticle]:
        resp = await self._client.fetch(self._base_url, request_kind=RequestKind.PAGE)
        return parse_news_homepage(resp.text, self._base_url)


class NewsFeedStrategy:
    """RSS feed, fetched by a fresh crawler-identity session each time."""

    name = "rss"
    placeholder = False

    def __init__(self, client: AntiDetectionClient, feed_url: str) -> None:
        self._client = client
        self._feed_url = feed_url

    async def attempt(self) -> list[NewsArticle]:
        self._client.registry.get(FEED_SESSION, force_new=True)
        resp = await self._client.fetch(
            self._feed_url,
            session_id=FEED_SESSION,
            content_kind="feed",
            request_kind=RequestKind.FEED,
            action_type="resourceFetch",
        )
        return await asyncio.to_thread(parse_news_feed, resp.text)


class NewsSitemapStrategy:
    """Google News sitemap, fetched by a fresh crawler-identity session."""

    name = "sitemap"
    placeholder = False

    def __init__(self, client: AntiDetectionClient, sitemap_url: str) -> None:
        self._client = client
        self._sitemap_url = sitemap_url

    async def attempt(self) -> list[NewsArticle]:
        self._client.registry.get(SITEMAP_SESSION, force_new=True)
        resp = await self._client.fetch(
            self._sitemap_url,
            session_id=SITEMAP_SESSION,
            content_kind="sitemap",
            request_kind=RequestKind.SITEMAP,
            action_type="resourceFetch",
            timeout=12.0,
        )
        return parse_news_sitemap(resp.text)


class NewsApiStrategy:
    """NewsAPI search for Counter-Strike coverage (needs an API key)."""

    name = "newsapi"
    placeholder = False

    def __init__(self, client: AntiDetectionClient, api_url: str, api_key: str) -> None:
        self._client = client
        self._api_url = api_url
        self._api_key = api_key

    async def attempt(self) -> list[NewsArticle]:
        resp = await self._client.fetch(
            self._api_url,
            session_id=NEWSAPI_SESSION,
            request_kind=RequestKind.API,
            action_type="resourceFetch",
            headers={"X-Api-Key": self._api_key, "Accept": "application/json"},
            timeout=8.0,
        )
        try:
            payload = resp.json()
        except ValueError as exc:
            raise ParseError(f"NewsAPI returned invalid JSON: {exc}", url=self._api_url, strategy=self.name) from exc

        articles: list[NewsArticle] = []
        for item in payload.get("articles") or []:
            if not item.get("title") or not item.get("url"):
                continue
            articles.append(NewsArticle(
                title=item["title"],
                url=item["url"],
                time=clock_label_from(item.get("publishedAt")),
                type="standard",
                image=item.get("urlToImage"),
            ))
        logger.debug("NewsAPI returned %d usable articles", len(articles))
        return articles


def simulated_news() -> list[NewsArticle]:
    """Generic pointers to the main site sections, stamped with the current time."""
    stamp = format_clock()
    today = date.today()
    label = f"{today.month}/{today.day}/{today.year}"
    items = [
        (f"CS2 Tournament Schedule for {label}", "https://www.hltv.org/events"),
        ("Latest CS2 Professional Player Transfers", "https://www.hltv.org/transfers"),
        ("CS2 Update: New Features and Balance Changes", "https://www.counter-strike.net/news"),
        ("Top Team Rankings for Counter-Strike", "https://www.hltv.org/ranking/teams"),
        ("Upcoming CS2 Matches to Watch This Week", "https://www.hltv.org/matches"),
    ]
    return [NewsArticle(title=title, url=url, time=stamp) for title, url in items]


def placeholder_news() -> list[NewsArticle]:
    stamp = format_clock()
    return [
        NewsArticle(
            title="Unable to fetch latest CS news - HLTV.org access restricted",
            url="https://www.hltv.org/news",
            time=stamp,
        ),
        NewsArticle(
            title="Visit HLTV.org directly for the latest Counter-Strike news",
            url="https://www.hltv.org/",
            time=stamp,
        ),
    ]


# ---------------------------------------------------------------------------
# Matches
# ---------------------------------------------------------------------------


class MatchesPageStrategy:
    """Upcoming matches from the matches page."""

    name = "matches_page"
    placeholder = False

    def __init__(self, client: AntiDetectionClient, base_url: str) -> None:
        self._client = client
        self._base_url = base_url

    async def attempt(self) -> list[Match]:
        resp = await self._client.fetch(f"{self._base_url}/matches", request_kind=RequestKind.PAGE)
        return parse_upcoming_matches(resp.text, self._base_url)


def placeholder_matches() -> list[Match]:
    return [
        Match(
            team1="Unable to fetch matches",
            team2="Please visit HLTV.org",
            match_time=format_clock(),
            match_meta="Data unavailable",
            match_url="https://www.hltv.org/matches",
        )
    ]


# ---------------------------------------------------------------------------
# Rankings
# ---------------------------------------------------------------------------


class RankingPageStrategy:
    """Team ranking from a ranking page.

    ``date_path`` may be a fixed ``YYYY/month/D`` string, a callable producing
    one, or None for the undated (latest) page.
    """

    placeholder = False

    def __init__(
        self,
        client: AntiDetectionClient,
        base_url: str,
        *,
        name: str = "ranking_page",
        date_path: str | Callable[[], str] | None = None,
    ) -> None:
        self.name = name
        self._client = client
        self._base_url = base_url
        self._date_path = date_path

    def url(self) -> str:
        path = self._date_path() if callable(self._date_path) else self._date_path
        if path:
            return f"{self._base_url}/ranking/teams/{path}"
        return f"{self._base_url}/ranking/teams"

    async def attempt(self) -> list[TeamRanking]:
        url = self.url()
        resp = await self._client.fetch(
            url,
            session_id=RANKINGS_SESSION,
            request_kind=RequestKind.PAGE,
            referer="https://www.google.com/",
            timeout=10.0,
        )
        return parse_rankings(resp.text)


def placeholder_rankings() -> list[TeamRanking]:
    return [
        TeamRanking(rank="1", name="Unable to fetch rankings"),
        TeamRanking(rank="2", name="Please visit HLTV.org"),
        TeamRanking(rank="3", name="for current rankings"),
    ]


# ---------------------------------------------------------------------------
# Chains
# ---------------------------------------------------------------------------


def news_strategies(
    client: AntiDetectionClient,
    *,
    base_url: str,
    feed_url: str,
    sitemap_url: str,
    newsapi_url: str,
    newsapi_key: Optional[str] = None,
) -> list[ContentStrategy]:
    """direct page -> RSS -> sitemap -> third-party -> static placeholder"""
    if newsapi_key:
        third_party: ContentStrategy = NewsApiStrategy(client, newsapi_url, newsapi_key)
    else:
        third_party = StaticFallback("simulated", simulated_news)
    return [
        NewsHomepageStrategy(client, base_url),
        NewsFeedStrategy(client, feed_url),
        NewsSitemapStrategy(client, sitemap_url),
        third_party,
        StaticFallback("static", placeholder_news),
    ]


def matches_strategies(client: AntiDetectionClient, *, base_url: str) -> list[ContentStrategy]:
    return [
        MatchesPageStrategy(client, base_url),
        StaticFallback("static", placeholder_matches),
    ]


def rankings_strategies(client: AntiDetectionClient, *, base_url: str) -> list[ContentStrategy]:
    return [
        RankingPageStrategy(client, base_url, name="dated_ranking_page", date_path=ranking_date_path),
        RankingPageStrategy(client, base_url, name="ranking_page"),
        StaticFallback("static", placeholder_rankings),
    ]
