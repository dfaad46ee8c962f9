"""
JSON file cache for scraped record sets.

One file per dataset (``<key>_cache.json``) holding
``{"timestamp": epoch_ms, "data": payload}``. Reads honour a per-dataset
TTL; writes are skipped when the payload is unchanged. File access runs in
worker threads so the event loop never blocks on disk.
"""

import asyncio
import json
import logging
import time
from pathlib import Path
from typing import Any, Callable, Optional

from .exceptions import CacheError, CacheUnavailableError

logger = logging.getLogger("csnews.storage.cache")

DEFAULT_TTL_HOURS = 1.0


def _now_ms() -> int:
    return int(time.time() * 1000)


class JsonFileCache:
    """
    TTL cache backed by one JSON file per key.

    Provides:
    - Freshness-checked reads (stale, missing or unreadable -> None)
    - Change-detecting writes
    - Explicit invalidation
    """

    def __init__(
        self,
        directory: Path | str,
        ttl_hours: Optional[dict[str, float]] = None,
        *,
        clock: Callable[[], int] = _now_ms,
    ):
        self.directory = Path(directory)
        self.ttl_hours = dict(ttl_hours or {})
        self._clock = clock
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheUnavailableError(self.directory, e) from e

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}_cache.json"

    def ttl_for(self, key: str) -> float:
        return self.ttl_hours.get(key, DEFAULT_TTL_HOURS)

    def _read(self, key: str) -> Optional[dict[str, Any]]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            entry = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise CacheError("read", key, e) from e
        if not isinstance(entry, dict) or "timestamp" not in entry or "data" not in entry:
            raise CacheError("read", key, ValueError("malformed cache entry"))
        timestamp = entry["timestamp"]
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise CacheError("read", key, ValueError(f"invalid cache timestamp {timestamp!r}"))
        return entry

    def _write(self, key: str, entry: dict[str, Any]) -> None:
        path = self.path_for(key)
        try:
            path.write_text(json.dumps(entry, indent=2), encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            raise CacheError("write", key, e) from e

    def _unlink(self, key: str) -> bool:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise CacheError("delete", key, e) from e
        return True

    async def get_entry(self, key: str) -> Optional[dict[str, Any]]:
        """Raw ``{timestamp, data}`` entry regardless of age, or None."""
        try:
            return await asyncio.to_thread(self._read, key)
        except CacheError as e:
            logger.error("%s", e)
            return None

    def age_hours(self, entry: dict[str, Any]) -> float:
        return (self._clock() - float(entry["timestamp"])) / (1000 * 60 * 60)

    async def get(self, key: str) -> Any:
        """Cached payload if fresh, else None."""
        entry = await self.get_entry(key)
        if entry is None:
            return None

        age = self.age_hours(entry)
        if age > self.ttl_for(key):
            logger.info("Cache expired: %s (%.2f hours old)", key, age)
            return None

        logger.info("Using cached data: %s (%.2f hours old)", key, age)
        return entry["data"]

    async def put(self, key: str, data: Any) -> bool:
        """Store ``data`` under ``key``.

        Returns:
            True if the file was written, False if the payload was unchanged
            or the write failed.
        """
        existing = await self.get_entry(key)
        if existing is not None and existing["data"] == data:
            logger.info("Cache not updated (no changes): %s", key)
            return False

        entry = {"timestamp": self._clock(), "data": data}
        try:
            await asyncio.to_thread(self._write, key, entry)
        except CacheError as e:
            logger.error("%s", e)
            return False

        logger.info("Cache updated: %s", key)
        return True

    async def delete(self, key: str) -> bool:
        """Remove the entry for ``key``. Returns whether a file was removed."""
        try:
            removed = await asyncio.to_thread(self._unlink, key)
        except CacheError as e:
            logger.error("%s", e)
            return False
        if removed:
            logger.info("Deleted cache entry: %s", key)
        return removed


def build_cache(cfg=None) -> JsonFileCache:
    """Create a cache from ``CacheConfig`` settings."""
    if cfg is None:
        from ..config import settings

        cfg = settings.cache
    return JsonFileCache(cfg.directory, cfg.ttl_map())
