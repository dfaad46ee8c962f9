"""
Tournament-name extraction from HLTV pages, the news feed and third-party
event APIs.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

import feedparser
from bs4 import BeautifulSoup
from dateutil import parser as dateutil_parser

logger = logging.getLogger("csnews.services.content.parsers.events")

# (container, name) selector pairs on hltv.org/events, most prominent first
EVENT_SELECTORS = (
    (".featured-event-box", ".featured-event-title"),
    (".big-event-container", ".big-event-name"),
    (".ongoing-event-container", ".event-name"),
)
MATCH_EVENT_SELECTOR = ".upcomingMatchesSection .matchInfoEmpty .matchEvent"
MIN_EVENT_NAME_LENGTH = 4


def parse_events_page(html: str) -> Optional[str]:
    """Featured event, else the first big event, else any ongoing event."""
    soup = BeautifulSoup(html, "html.parser")
    for container, name_selector in EVENT_SELECTORS:
        for box in soup.select(container):
            name_el = box.select_one(name_selector)
            name = name_el.get_text(strip=True) if name_el else ""
            if name:
                return name
    return None


def parse_matches_page_event(html: str) -> Optional[str]:
    """First event label attached to an upcoming match."""
    soup = BeautifulSoup(html, "html.parser")
    for el in soup.select(MATCH_EVENT_SELECTOR):
        name = el.get_text(strip=True)
        if len(name) >= MIN_EVENT_NAME_LENGTH:
            return name
    return None


def feed_text(xml: str) -> str:
    """Concatenated titles and descriptions of every feed item."""
    feed = feedparser.parse(xml)
    parts: list[str] = []
    for entry in feed.entries:
        parts.append(entry.get("title", ""))
        parts.append(entry.get("summary", ""))
    return " ".join(parts)


def find_tournament_mention(text: str, patterns: Iterable[str]) -> Optional[str]:
    """First match of the first pattern (in order) that matches anywhere."""
    for pattern in patterns:
        found = re.search(pattern, text, re.IGNORECASE)
        if found:
            return found.group(0)
    return None


def _end_timestamp(event: dict[str, Any]) -> float:
    raw = event.get("end_date") or "2099-12-31"
    try:
        end = dateutil_parser.parse(raw)
    except (ValueError, OverflowError):
        return float("inf")
    if end.tzinfo is None:
        end = end.replace(tzinfo=timezone.utc)
    return end.timestamp()


def pick_esportsguide_event(payload: Any, now: datetime | None = None) -> Optional[str]:
    """Highest-tier event (lowest tier number) that has not ended yet."""
    if not isinstance(payload, dict):
        return None
    events = payload.get("data") or []
    if not events:
        return None

    now_ts = (now or datetime.now(timezone.utc)).timestamp()
    ranked = sorted(events, key=lambda e: e.get("tier") or 999)
    for event in ranked:
        if _end_timestamp(event) > now_ts and event.get("name"):
            return event["name"]
    return None


def parse_liquipedia_tournaments(payload: Any) -> Optional[str]:
    """First tournament label in Liquipedia's upcoming-matches page."""
    if not isinstance(payload, dict):
        return None
    html = (payload.get("parse") or {}).get("text", {}).get("*")
    if not html:
        return None

    soup = BeautifulSoup(html, "html.parser")
    for box in soup.select(".infobox_matches_content"):
        label = box.select_one(".team-template-text")
        name = label.get_text(strip=True) if label else ""
        if name:
            return name
    return None


def pick_lobby_event(payload: Any) -> Optional[str]:
    """First featured event from the HLTV events lobby, else the first event."""
    if not isinstance(payload, dict):
        return None
    events = payload.get("events") or []
    if not events:
        return None

    featured = [e for e in events if e.get("featured")]
    chosen = featured[0] if featured else events[0]
    return chosen.get("name") or chosen.get("eventName")
