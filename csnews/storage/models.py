"""
Data models for scraped records.

These are plain dataclasses serialized to the JSON cache with
``to_dict`` / ``from_dict``.
"""

from dataclasses import dataclass
from typing import Any, Optional

NEWS_TYPES = ("standard", "featured")


@dataclass
class NewsArticle:
    """A news headline."""

    title: str
    url: str
    time: str
    type: str = "standard"
    image: Optional[str] = None
    from_cache: bool = False

    def to_dict(self) -> dict[str, Any]:
        # from_cache is a read-path marker and is never persisted
        data: dict[str, Any] = {
            "title": self.title,
            "url": self.url,
            "time": self.time,
            "type": self.type,
        }
        if self.image:
            data["image"] = self.image
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, from_cache: bool = False) -> "NewsArticle":
        article_type = data.get("type") or "standard"
        if article_type not in NEWS_TYPES:
            article_type = "standard"
        return cls(
            title=data.get("title", ""),
            url=data.get("url", ""),
            time=data.get("time", ""),
            type=article_type,
            image=data.get("image"),
            from_cache=from_cache,
        )


@dataclass
class Match:
    """An upcoming match."""

    team1: str
    team2: str
    match_time: str
    match_meta: str
    match_url: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "team1": self.team1,
            "team2": self.team2,
            "match_time": self.match_time,
            "match_meta": self.match_meta,
            "match_url": self.match_url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Match":
        return cls(
            team1=data.get("team1", ""),
            team2=data.get("team2", ""),
            match_time=data.get("match_time", ""),
            match_meta=data.get("match_meta", ""),
            match_url=data.get("match_url", ""),
        )


@dataclass
class TeamRanking:
    """One row of the world team ranking."""

    rank: str
    name: str
    points: str = "N/A"

    def to_dict(self) -> dict[str, Any]:
        return {"rank": self.rank, "name": self.name, "points": self.points}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TeamRanking":
        return cls(
            rank=str(data.get("rank", "")),
            name=data.get("name", ""),
            points=data.get("points") or "N/A",
        )
