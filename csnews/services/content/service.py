"""
Content service: the public face of the scraper.

Wires the anti-detection client, the file cache and the strategy chains
together and exposes one coroutine per dataset.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable, Optional

from ...storage.cache import JsonFileCache, build_cache
from ...storage.models import Match, NewsArticle, TeamRanking
from ..scraping.client import AntiDetectionClient, get_scrape_client
from ..scraping.exceptions import ParseError
from ..scraping.rate_limiter import RequestKind
from .parsers import parse_rankings
from .pipeline import MATCHES, NEWS, TEAMS, TOURNAMENT, ContentPipeline
from .strategies import (
    RANKINGS_SESSION,
    matches_strategies,
    news_strategies,
    rankings_strategies,
)
from .tournament import GENERIC_TOURNAMENT, tournament_strategies

logger = logging.getLogger("csnews.services.content.service")


class ContentService:
    """News, matches, rankings and the current tournament, cache first."""

    def __init__(
        self,
        client: AntiDetectionClient,
        cache: JsonFileCache,
        *,
        scraper_cfg=None,
        tournament_cfg=None,
        today: Callable[[], date] = date.today,
    ) -> None:
        if scraper_cfg is None or tournament_cfg is None:
            from ...config import settings

            scraper_cfg = scraper_cfg or settings.scraper
            tournament_cfg = tournament_cfg or settings.tournament

        self.client = client
        self.cache = cache
        self.pipeline = ContentPipeline(cache)
        self._scraper = scraper_cfg
        self._tournament = tournament_cfg
        self._today = today

    @property
    def base_url(self) -> str:
        return self._scraper.base_url.rstrip("/")

    async def get_latest_news(self) -> list[NewsArticle]:
        """Latest headlines; cached articles come back with ``from_cache`` set."""
        strategies = news_strategies(
            self.client,
            base_url=self.base_url,
            feed_url=self._scraper.rss_feed_url,
            sitemap_url=self._scraper.news_sitemap_url,
            newsapi_url=self._scraper.newsapi_url,
            newsapi_key=self._scraper.newsapi_key,
        )
        result = await self.pipeline.run(NEWS, strategies)
        return result.records

    async def get_upcoming_matches(self, limit: int = 5) -> list[Match]:
        result = await self.pipeline.run(MATCHES, matches_strategies(self.client, base_url=self.base_url))
        return result.records[:limit]

    async def get_top_teams(self, limit: int = 5) -> list[TeamRanking]:
        result = await self.pipeline.run(TEAMS, rankings_strategies(self.client, base_url=self.base_url))
        return result.records[:limit]

    async def update_team_rankings(self, date_string: str) -> list[TeamRanking]:
        """Refresh the ranking cache from a specific ranking date.

        Args:
            date_string: ``YYYY/month/DD``, e.g. ``2025/may/12``.

        Raises:
            ParseError: the page held no ranking rows.
            ScrapeError: the page could not be fetched.
        """
        url = f"{self.base_url}/ranking/teams/{date_string.strip('/')}"
        logger.info("Manually updating team rankings from %s", url)

        resp = await self.client.fetch(
            url,
            session_id=RANKINGS_SESSION,
            request_kind=RequestKind.PAGE,
            referer="https://www.google.com/",
        )
        teams = parse_rankings(resp.text)
        if not teams:
            raise ParseError(f"No teams found at {url}", url=url, strategy="manual_ranking_update")

        logger.info("Fetched %d teams from %s", len(teams), url)
        await self.cache.put(TEAMS.key, TEAMS.encode(teams))
        return teams

    async def get_current_tournament(self) -> str:
        strategies = tournament_strategies(
            self.client,
            base_url=self.base_url,
            feed_url=self._scraper.rss_feed_url,
            known_events=self._tournament.known_events,
            mention_patterns=self._tournament.mention_patterns,
            esportsguide_url=self._tournament.esportsguide_url,
            liquipedia_url=self._tournament.liquipedia_url,
            today=self._today,
        )
        try:
            result = await self.pipeline.run(TOURNAMENT, strategies)
        except LookupError:
            return GENERIC_TOURNAMENT
        return result.records[0]

    async def force_update_tournament_cache(self) -> str:
        """Drop the cached tournament and look it up again."""
        await self.cache.delete(TOURNAMENT.key)
        name = await self.get_current_tournament()
        logger.info("Updated tournament cache with: %s", name)
        return name


# ---------------------------------------------------------------------------
# Module-level singleton (lazy init)
# ---------------------------------------------------------------------------

_service: Optional[ContentService] = None


def get_content_service() -> ContentService:
    """Get or create the module-level content service singleton."""
    global _service
    if _service is None:
        _service = ContentService(get_scrape_client(), build_cache())
    return _service
