"""
Storage module for csnews.

Provides persistent storage for:
- Scraped news, matches, rankings and tournament lookups (JSON file cache)
- The record types those datasets hold
"""

from .cache import JsonFileCache, build_cache
from .exceptions import (
    StorageError,
    CacheError,
    CacheUnavailableError,
)
from .models import Match, NewsArticle, TeamRanking

__all__ = [
    "JsonFileCache",
    "build_cache",
    "StorageError",
    "CacheError",
    "CacheUnavailableError",
    "Match",
    "NewsArticle",
    "TeamRanking",
]
