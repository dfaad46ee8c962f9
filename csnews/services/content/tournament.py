"""
Current-tournament lookup.

Chain: events page -> matches page -> news-feed mentions -> known-event
calendar -> third-party event APIs (esportsguide, Liquipedia, HLTV events
lobby) -> a name synthesized from the date. The last step never fails.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Callable, Mapping, Optional, Sequence

from ..scraping.client import AntiDetectionClient
from ..scraping.exceptions import ParseError
from ..scraping.profiles import ProfileCatalog, default_catalog
from ..scraping.rate_limiter import RequestKind
from .parsers import (
    feed_text,
    find_tournament_mention,
    parse_events_page,
    parse_liquipedia_tournaments,
    parse_matches_page_event,
    pick_esportsguide_event,
    pick_lobby_event,
)
from .strategies import ContentStrategy

logger = logging.getLogger("csnews.services.content.tournament")

TOURNAMENT_SESSION = "tournament_session"
ESPORTSGUIDE_SESSION = "api_esportsguide_session"
LIQUIPEDIA_SESSION = "api_liquipedia_session"
HLTV_API_SESSION = "hltv_api_session"

GENERIC_TOURNAMENT = "CS Tournament"

Today = Callable[[], date]


def month_key(day: date) -> str:
    return f"{day.year}-{day.month:02d}"


def synthesize_tournament_name(day: date, known_events: Mapping[str, str] | None = None) -> str:
    """Plausible event name for the time of year."""
    if known_events and month_key(day) in known_events:
        return known_events[month_key(day)]

    year, month = day.year, day.month
    if month in (1, 2):
        return f"BLAST Premier Spring Groups {year}"
    if month == 3:
        return f"ESL Pro League Season {(year - 2015) * 2}"
    if month == 4:
        return f"ESL Challenger Spring {year}"
    if month == 5:
        return f"IEM Dallas {year}"
    if month == 6:
        return f"BLAST Premier Spring Finals {year}"
    if month in (7, 8):
        return f"IEM Cologne {year}"
    if month == 9:
        return f"ESL Pro League Season {(year - 2015) * 2 + 1}"
    if month == 10:
        return f"BLAST Premier Fall Groups {year}"
    if month == 11:
        return f"Major Championship {year}"
    return f"BLAST Premier World Final {year}"


def _one(name: Optional[str]) -> list[str]:
    return [name] if name else []


def _json(resp, *, strategy: str):
    try:
        return resp.json()
    except ValueError as exc:
        raise ParseError(f"Invalid JSON: {exc}", url=str(resp.url), strategy=strategy) from exc


class EventsPageStrategy:
    name = "events_page"
    placeholder = False

    def __init__(self, client: AntiDetectionClient, base_url: str) -> None:
        self._client = client
        self._base_url = base_url

    async def attempt(self) -> list[str]:
        resp = await self._client.fetch(
            f"{self._base_url}/events",
            session_id=TOURNAMENT_SESSION,
            request_kind=RequestKind.PAGE,
            timeout=10.0,
        )
        return _one(parse_events_page(resp.text))


class MatchesPageEventStrategy:
    name = "matches_page"
    placeholder = False

    def __init__(self, client: AntiDetectionClient, base_url: str) -> None:
        self._client = client
        self._base_url = base_url

    async def attempt(self) -> list[str]:
        resp = await self._client.fetch(
            f"{self._base_url}/matches",
            request_kind=RequestKind.PAGE,
            timeout=10.0,
        )
        return _one(parse_matches_page_event(resp.text))


class FeedMentionStrategy:
    """First tournament-looking phrase in the news feed titles/descriptions."""

    name = "feed_mentions"
    placeholder = False

    def __init__(self, client: AntiDetectionClient, feed_url: str, patterns: Sequence[str]) -> None:
        self._client = client
        self._feed_url = feed_url
        self._patterns = list(patterns)

    async def attempt(self) -> list[str]:
        resp = await self._client.fetch(
            self._feed_url,
            content_kind="feed",
            request_kind=RequestKind.FEED,
            action_type="resourceFetch",
            timeout=8.0,
        )
        text = await asyncio.to_thread(feed_text, resp.text)
        return _one(find_tournament_mention(text, self._patterns))


class CalendarStrategy:
    """Known events keyed by ``YYYY-MM``."""

    name = "calendar"
    placeholder = False

    def __init__(self, known_events: Mapping[str, str], today: Today = date.today) -> None:
        self._known_events = dict(known_events)
        self._today = today

    async def attempt(self) -> list[str]:
        name = self._known_events.get(month_key(self._today()))
        if name:
            logger.info("Current date indicates %s is the active tournament", name)
        return _one(name)


class EsportsguideStrategy:
    name = "esportsguide_api"
    placeholder = False

    def __init__(self, client: AntiDetectionClient, url: str) -> None:
        self._client = client
        self._url = url

    async def attempt(self) -> list[str]:
        resp = await self._client.fetch(
            self._url,
            session_id=ESPORTSGUIDE_SESSION,
            request_kind=RequestKind.API,
            action_type="resourceFetch",
            include_origin=True,
            timeout=8.0,
        )
        return _one(pick_esportsguide_event(_json(resp, strategy=self.name)))


class LiquipediaStrategy:
    name = "liquipedia_api"
    placeholder = False

    HEADERS = {
        "User-Agent": "Mozilla/5.0 (compatible; CSNewsBot/1.0; +https://github.com/csnews/bot)",
        "Accept": "application/json",
        "Referer": "https://liquipedia.net/counterstrike/",
    }

    def __init__(self, client: AntiDetectionClient, url: str) -> None:
        self._client = client
        self._url = url

    async def attempt(self) -> list[str]:
        self._client.registry.get(LIQUIPEDIA_SESSION, force_new=True)
        resp = await self._client.fetch(
            self._url,
            session_id=LIQUIPEDIA_SESSION,
            request_kind=RequestKind.API,
            action_type="resourceFetch",
            headers=self.HEADERS,
            timeout=8.0,
        )
        return _one(parse_liquipedia_tournaments(_json(resp, strategy=self.name)))


class HltvLobbyStrategy:
    """HLTV's events-lobby JSON, requested as an XHR from a Firefox identity."""

    name = "hltv_lobby_api"
    placeholder = False

    def __init__(
        self,
        client: AntiDetectionClient,
        base_url: str,
        catalog: ProfileCatalog = default_catalog,
    ) -> None:
        self._client = client
        self._base_url = base_url
        self._catalog = catalog

    def _pinned_session(self):
        registry = self._client.registry
        session = registry.get(HLTV_API_SESSION)
        if session.profile.family != "Firefox":
            firefox = self._catalog.find_by_family("Firefox")
            if firefox is not None:
                registry.create(HLTV_API_SESSION, profile=firefox)
                session = registry.peek(HLTV_API_SESSION)
        return session

    async def attempt(self) -> list[str]:
        session = self._pinned_session()
        url = f"{self._base_url}/events/lobby/data"
        resp = await self._client.fetch(
            url,
            session_id=HLTV_API_SESSION,
            request_kind=RequestKind.API,
            action_type="resourceFetch",
            headers={
                "User-Agent": session.profile.user_agent,
                "Accept": "application/json, text/plain, */*",
                "Accept-Language": session.profile.accept_language,
                "X-Requested-With": "XMLHttpRequest",
                "Sec-Fetch-Dest": "empty",
                "Sec-Fetch-Mode": "cors",
                "Origin": self._base_url,
            },
            timeout=8.0,
        )
        return _one(pick_lobby_event(_json(resp, strategy=self.name)))


class DateSynthesisStrategy:
    """Never fails; treated as a placeholder so it is not cached."""

    name = "date_synthesis"
    placeholder = True

    def __init__(self, known_events: Mapping[str, str] | None = None, today: Today = date.today) -> None:
        self._known_events = dict(known_events or {})
        self._today = today

    async def attempt(self) -> list[str]:
        return [synthesize_tournament_name(self._today(), self._known_events) or GENERIC_TOURNAMENT]


def tournament_strategies(
    client: AntiDetectionClient,
    *,
    base_url: str,
    feed_url: str,
    known_events: Mapping[str, str],
    mention_patterns: Sequence[str],
    esportsguide_url: str,
    liquipedia_url: str,
    today: Today = date.today,
) -> list[ContentStrategy]:
    return [
        EventsPageStrategy(client, base_url),
        MatchesPageEventStrategy(client, base_url),
        FeedMentionStrategy(client, feed_url, mention_patterns),
        CalendarStrategy(known_events, today),
        EsportsguideStrategy(client, esportsguide_url),
        LiquipediaStrategy(client, liquipedia_url),
        HltvLobbyStrategy(client, base_url),
        DateSynthesisStrategy(known_events, today),
    ]
