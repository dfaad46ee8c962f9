"""
Team ranking parser.

URL patterns:
  dated: hltv.org/ranking/teams/{YYYY}/{month}/{D}
  generic: hltv.org/ranking/teams
The page layout has changed over time, so each field is read from the first
of several selector alternatives.
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup

from ....storage.models import TeamRanking

logger = logging.getLogger("csnews.services.content.parsers.rankings")

ROW_SELECTOR = ".ranked-team, .team, .teamline"
RANK_SELECTOR = ".position, .numberAndTrophy, .ranking-number"
NAME_SELECTOR = ".name, .nameCol, .ranking-team-name"
POINTS_SELECTOR = ".points, .ratingCol, .ranking-team-points"

_NON_DIGITS = re.compile(r"[^0-9]")


def _first_text(row, selector: str) -> str:
    found = row.select_one(selector)
    return found.get_text(strip=True) if found else ""


def parse_rankings(html: str, *, row_selector: str = ROW_SELECTOR) -> list[TeamRanking]:
    """Rows with both a rank and a name; rank keeps digits only."""
    soup = BeautifulSoup(html, "html.parser")
    teams: list[TeamRanking] = []
    seen: set[tuple[str, str]] = set()

    for row in soup.select(row_selector):
        rank = _NON_DIGITS.sub("", _first_text(row, RANK_SELECTOR))
        name = _first_text(row, NAME_SELECTOR)
        if not rank or not name:
            logger.debug("Skipped ranking row (rank=%r, name=%r)", rank, name)
            continue
        # nested .team blocks inside a .ranked-team row repeat the same fields
        if (rank, name) in seen:
            continue
        seen.add((rank, name))
        teams.append(TeamRanking(
            rank=rank,
            name=name,
            points=_first_text(row, POINTS_SELECTOR) or "N/A",
        ))

    return teams
