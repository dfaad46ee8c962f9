"""
Centralized configuration management using Pydantic Settings.

Configuration is loaded from environment variables with sensible defaults.
A legacy ``config.json`` document (camelCase keys under ``scraper``) can be
layered on top with ``load_settings``.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("csnews.config")


class ScraperConfig(BaseSettings):
    """Anti-detection client and rate limiting."""

    model_config = SettingsConfigDict(env_prefix="CSNEWS_SCRAPER_", env_file=".env", extra="ignore")

    base_url: str = Field(default="https://www.hltv.org", description="Site root scraped for news/matches")
    rss_feed_url: str = Field(default="https://www.hltv.org/rss/news", description="RSS news feed")
    news_sitemap_url: str = Field(default="https://www.hltv.org/news-sitemap.xml", description="Google News sitemap")

    request_interval_ms: int = Field(default=60_000, ge=1000, description="Sliding rate-limit window (ms)")
    max_requests_per_interval: int = Field(default=4, ge=1, le=1000, description="Max admissions per window")
    use_session_rotation: bool = Field(default=True, description="Rotate identities that outlive their behaviour")
    use_proxies: bool = Field(default=False, description="Assign a proxy to each identity session")
    proxy_type: str = Field(default="standard", description="Proxy pool: standard, residential or datacenter")
    session_ttl_minutes: float = Field(default=30, gt=0, description="Max identity age before eviction")
    max_sessions: int = Field(default=5, ge=1, le=100, description="Max concurrent identity sessions")
    default_timeout_ms: int = Field(default=15_000, ge=1000, description="Per-request timeout (ms)")

    newsapi_key: Optional[str] = Field(default=None, description="NewsAPI key for the third-party news source")
    newsapi_url: str = Field(
        default="https://newsapi.org/v2/everything?q=counter+strike+csgo+cs2&language=en&sortBy=publishedAt&pageSize=10",
        description="NewsAPI query used when a key is set",
    )


class CacheConfig(BaseSettings):
    """File cache for scraped record sets."""

    model_config = SettingsConfigDict(env_prefix="CSNEWS_CACHE_", env_file=".env", extra="ignore")

    directory: Path = Field(default=Path("cache"), description="Cache directory")
    news_ttl_hours: float = Field(default=1.0, gt=0, description="News cache TTL")
    matches_ttl_hours: float = Field(default=1.0, gt=0, description="Upcoming matches cache TTL")
    teams_ttl_hours: float = Field(default=1.0, gt=0, description="Team rankings cache TTL")
    tournament_ttl_hours: float = Field(default=6.0, gt=0, description="Current tournament cache TTL")

    def ttl_map(self) -> dict[str, float]:
        return {
            "news": self.news_ttl_hours,
            "matches": self.matches_ttl_hours,
            "teams": self.teams_ttl_hours,
            "tournament": self.tournament_ttl_hours,
        }


class ProxyEndpoint(BaseModel):
    host: str
    port: int
    username: Optional[str] = None
    password: Optional[str] = None


class ProxyPoolConfig(BaseSettings):
    """Proxy pools by type (JSON lists in env vars)."""

    model_config = SettingsConfigDict(env_prefix="CSNEWS_PROXY_", env_file=".env", extra="ignore")

    standard: list[ProxyEndpoint] = Field(default_factory=list)
    residential: list[ProxyEndpoint] = Field(default_factory=list)
    datacenter: list[ProxyEndpoint] = Field(default_factory=list)


class TournamentConfig(BaseSettings):
    """Heuristics for the current-tournament lookup."""

    model_config = SettingsConfigDict(env_prefix="CSNEWS_TOURNAMENT_", env_file=".env", extra="ignore")

    known_events: dict[str, str] = Field(
        default_factory=lambda: {"2025-05": "IEM Dallas 2025"},
        description="Known events keyed by YYYY-MM",
    )
    mention_patterns: list[str] = Field(
        default_factory=lambda: [
            r"IEM\s+Dallas\s+2025",
            r"IEM\s+\w+",
            r"ESL\s+Pro\s+League",
            r"ESL\s+One\s+\w+",
            r"BLAST\s+Premier",
            r"\w+\s+Major",
            r"Dreamhack\s+\w+",
        ],
        description="Regexes matched against RSS titles/descriptions, first hit wins",
    )
    esportsguide_url: str = Field(default="https://www.esportsguide.com/api/events?games=csgo")
    liquipedia_url: str = Field(
        default="https://liquipedia.net/counterstrike/api.php?action=parse&format=json&page=Liquipedia:Upcoming_and_ongoing_matches",
    )


class Settings(BaseSettings):
    """Application-wide settings."""

    model_config = SettingsConfigDict(
        env_prefix="CSNEWS_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Logging level")

    scraper: ScraperConfig = Field(default_factory=ScraperConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    proxies: ProxyPoolConfig = Field(default_factory=ProxyPoolConfig)
    tournament: TournamentConfig = Field(default_factory=TournamentConfig)


# camelCase keys of the legacy config.json "scraper" section -> (group, field)
_LEGACY_SCRAPER_KEYS: dict[str, tuple[str, Optional[str]]] = {
    "maxRequestsPerInterval": ("scraper", "max_requests_per_interval"),
    "requestIntervalMs": ("scraper", "request_interval_ms"),
    "useSessionRotation": ("scraper", "use_session_rotation"),
    "useProxies": ("scraper", "use_proxies"),
    "proxyType": ("scraper", "proxy_type"),
    "sessionTtl": ("scraper", "session_ttl_minutes"),
    "maxSessions": ("scraper", "max_sessions"),
    "defaultTimeout": ("scraper", "default_timeout_ms"),
    "newsApiKey": ("scraper", "newsapi_key"),
    "cacheTTLHours": ("cache", None),
    "tournamentCacheTTLHours": ("cache", "tournament_ttl_hours"),
}


def settings_from_document(document: dict[str, Any]) -> Settings:
    """Build Settings from a parsed config document.

    Recognised fields are all optional; anything missing keeps its default.
    ``cacheTTLHours`` sets the news, matches and teams TTLs together.
    """
    base = Settings()
    overrides: dict[str, dict[str, Any]] = {}
    section = document.get("scraper") or {}

    for key, value in section.items():
        target = _LEGACY_SCRAPER_KEYS.get(key)
        if target is None:
            continue
        group, field = target
        if field is None:
            overrides.setdefault("cache", {}).update({
                "news_ttl_hours": value,
                "matches_ttl_hours": value,
                "teams_ttl_hours": value,
            })
        else:
            overrides.setdefault(group, {})[field] = value

    if "proxies" in document:
        overrides["proxies"] = document["proxies"]
    if "tournament" in document:
        overrides["tournament"] = document["tournament"]

    merged = base.model_dump()
    for group, values in overrides.items():
        merged[group] = {**merged.get(group, {}), **values}
    return Settings.model_validate(merged)


def load_settings(path: Path | str) -> Settings:
    """Load settings from a legacy JSON config file.

    A missing file yields env/default settings; an unreadable or invalid
    file is logged and also yields defaults.
    """
    path = Path(path)
    if not path.exists():
        return Settings()
    try:
        document = json.loads(path.read_text(encoding="utf-8"))
        return settings_from_document(document)
    except (OSError, ValueError, ValidationError) as exc:
        logger.error("Error loading scraper config %s: %s", path, exc)
        return Settings()


# Singleton settings instance
settings = Settings()
