"""
HTML/XML parsers for HLTV content.

Each parser takes response text and returns record objects; an empty list
means the expected structure was not present.
"""

from .events import (
    feed_text,
    find_tournament_mention,
    parse_events_page,
    parse_liquipedia_tournaments,
    parse_matches_page_event,
    pick_esportsguide_event,
    pick_lobby_event,
)
from .matches import parse_upcoming_matches
from .news import parse_news_feed, parse_news_homepage, parse_news_sitemap
from .rankings import parse_rankings

__all__ = [
    "feed_text",
    "find_tournament_mention",
    "parse_events_page",
    "parse_liquipedia_tournaments",
    "parse_matches_page_event",
    "pick_esportsguide_event",
    "pick_lobby_event",
    "parse_upcoming_matches",
    "parse_news_feed",
    "parse_news_homepage",
    "parse_news_sitemap",
    "parse_rankings",
]
