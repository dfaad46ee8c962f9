"""
Upcoming matches parser.

URL pattern: hltv.org/matches (.upcomingMatchesContainer .upcomingMatch)
"""

from __future__ import annotations

import logging
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ....storage.models import Match

logger = logging.getLogger("csnews.services.content.parsers.matches")


def _text(el, selector: str) -> str:
    found = el.select_one(selector)
    return found.get_text(strip=True) if found else ""


def parse_upcoming_matches(html: str, base_url: str) -> list[Match]:
    """Parse every upcoming match card on the matches page."""
    soup = BeautifulSoup(html, "html.parser")
    matches: list[Match] = []

    for card in soup.select(".upcomingMatchesContainer .upcomingMatch"):
        try:
            teams = card.select(".matchTeam")
            team1 = _text(teams[0], ".matchTeamName") if teams else ""
            team2 = _text(teams[-1], ".matchTeamName") if len(teams) > 1 else ""
            link = card.select_one("a.match")
            matches.append(Match(
                team1=team1,
                team2=team2,
                match_time=_text(card, ".matchTime"),
                match_meta=_text(card, ".matchMeta"),
                match_url=urljoin(base_url, link.get("href") or "") if link else base_url,
            ))
        except Exception:
            logger.debug("Failed to parse match card", exc_info=True)

    return matches
