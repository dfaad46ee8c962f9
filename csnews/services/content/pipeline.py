"""
Cache-backed fallback pipeline.

For one dataset: return the cached record set while it is fresh, otherwise
try each strategy in order and stop at the first that yields records.
Non-placeholder results are written back to the cache.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from ...storage.cache import JsonFileCache
from ...storage.models import Match, NewsArticle, TeamRanking
from ..scraping.exceptions import ScrapeError
from .strategies import ContentStrategy

logger = logging.getLogger("csnews.services.content.pipeline")


@dataclass(frozen=True)
class Dataset:
    """How a record set is keyed and (de)serialized in the cache."""

    key: str
    encode: Callable[[list], Any]
    decode: Callable[[Any], list]


def _encode_records(records: list) -> list[dict[str, Any]]:
    return [r.to_dict() for r in records]


NEWS = Dataset(
    "news",
    encode=_encode_records,
    decode=lambda data: [NewsArticle.from_dict(d, from_cache=True) for d in data],
)
MATCHES = Dataset(
    "matches",
    encode=_encode_records,
    decode=lambda data: [Match.from_dict(d) for d in data],
)
TEAMS = Dataset(
    "teams",
    encode=_encode_records,
    decode=lambda data: [TeamRanking.from_dict(d) for d in data],
)
TOURNAMENT = Dataset(
    "tournament",
    encode=lambda names: {"name": names[0]},
    decode=lambda data: [data["name"]] if isinstance(data, dict) and data.get("name") else [],
)


@dataclass
class PipelineResult:
    """Records plus where they came from."""

    records: list
    source: str
    from_cache: bool = False
    placeholder: bool = False


class ContentPipeline:
    """Runs ordered strategies behind a TTL cache."""

    def __init__(self, cache: JsonFileCache) -> None:
        self.cache = cache

    async def cached(self, dataset: Dataset) -> Optional[list]:
        data = await self.cache.get(dataset.key)
        if data is None:
            return None
        try:
            records = dataset.decode(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error("Discarding unreadable %s cache entry: %s", dataset.key, e)
            return None
        return records or None

    async def run(
        self,
        dataset: Dataset,
        strategies: Sequence[ContentStrategy],
        *,
        use_cache: bool = True,
    ) -> PipelineResult:
        """Resolve a record set for ``dataset``.

        Raises:
            LookupError: if every strategy came back empty. Chains end with a
                placeholder strategy, so this only happens for custom chains.
        """
        if use_cache:
            records = await self.cached(dataset)
            if records is not None:
                return PipelineResult(records=records, source="cache", from_cache=True)

        for strategy in strategies:
            try:
                records = await strategy.attempt()
            except ScrapeError as e:
                logger.warning(
                    "%s strategy '%s' failed (url=%s, session=%s): %s",
                    dataset.key, strategy.name, e.url, e.session_id, e,
                )
                continue
            except Exception as e:
                logger.warning(
                    "%s strategy '%s' failed: %s", dataset.key, strategy.name, e,
                    exc_info=True,
                )
                continue

            if not records:
                logger.warning("%s strategy '%s' returned no records", dataset.key, strategy.name)
                continue

            if strategy.placeholder:
                logger.info(
                    "All %s methods failed, using '%s' fallback content",
                    dataset.key, strategy.name,
                )
                return PipelineResult(records=list(records), source=strategy.name, placeholder=True)

            logger.info(
                "Fetched %d %s records via '%s'", len(records), dataset.key, strategy.name,
            )
            await self.cache.put(dataset.key, dataset.encode(list(records)))
            return PipelineResult(records=list(records), source=strategy.name)

        raise LookupError(f"No strategy produced {dataset.key} records")
