"""
Tests for the JSON file cache.
"""

import json

import pytest

from csnews.storage.cache import JsonFileCache, build_cache
from csnews.storage.exceptions import CacheUnavailableError

HOUR_MS = 60 * 60 * 1000


class FakeClock:
    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(tmp_path, clock):
    return JsonFileCache(tmp_path / "cache", {"news": 1.0, "teams": 24.0}, clock=clock)


class TestReadWrite:
    @pytest.mark.asyncio
    async def test_put_then_get(self, cache):
        assert await cache.put("news", [{"title": "a"}])
        assert await cache.get("news") == [{"title": "a"}]

    @pytest.mark.asyncio
    async def test_file_layout(self, cache, clock):
        await cache.put("matches", [1, 2])

        path = cache.path_for("matches")
        assert path.name == "matches_cache.json"
        assert json.loads(path.read_text()) == {"timestamp": clock.now, "data": [1, 2]}

    @pytest.mark.asyncio
    async def test_missing_key(self, cache):
        assert await cache.get("news") is None
        assert await cache.get_entry("news") is None

    @pytest.mark.asyncio
    async def test_unchanged_payload_is_not_rewritten(self, cache, clock):
        await cache.put("news", ["x"])
        clock.now += 10_000

        assert not await cache.put("news", ["x"])
        entry = await cache.get_entry("news")
        assert entry["timestamp"] == clock.now - 10_000

    @pytest.mark.asyncio
    async def test_changed_payload_refreshes_timestamp(self, cache, clock):
        await cache.put("news", ["x"])
        clock.now += 10_000

        assert await cache.put("news", ["y"])
        entry = await cache.get_entry("news")
        assert entry == {"timestamp": clock.now, "data": ["y"]}

    @pytest.mark.asyncio
    async def test_delete(self, cache):
        await cache.put("tournament", {"name": "IEM Dallas 2025"})
        assert await cache.delete("tournament")
        assert not cache.path_for("tournament").exists()
        assert not await cache.delete("tournament")


class TestExpiry:
    @pytest.mark.asyncio
    async def test_fresh_within_ttl(self, cache, clock):
        await cache.put("news", ["x"])
        clock.now += HOUR_MS // 2
        assert await cache.get("news") == ["x"]

    @pytest.mark.asyncio
    async def test_exactly_at_ttl_is_still_fresh(self, cache, clock):
        await cache.put("news", ["x"])
        clock.now += HOUR_MS
        assert await cache.get("news") == ["x"]

    @pytest.mark.asyncio
    async def test_stale_after_ttl(self, cache, clock):
        await cache.put("news", ["x"])
        clock.now += HOUR_MS + 1
        assert await cache.get("news") is None
        # the raw entry survives for callers that accept stale data
        assert (await cache.get_entry("news"))["data"] == ["x"]

    @pytest.mark.asyncio
    async def test_per_key_ttl(self, cache, clock):
        await cache.put("teams", ["t"])
        clock.now += 23 * HOUR_MS
        assert await cache.get("teams") == ["t"]

    def test_unknown_key_defaults_to_one_hour(self, cache):
        assert cache.ttl_for("tournament") == 1.0


class TestCorruption:
    @pytest.mark.asyncio
    async def test_invalid_json_reads_as_missing(self, cache):
        cache.path_for("news").write_text("{not json", encoding="utf-8")
        assert await cache.get("news") is None

    @pytest.mark.asyncio
    async def test_malformed_entry_reads_as_missing(self, cache):
        cache.path_for("news").write_text(json.dumps({"data": []}), encoding="utf-8")
        assert await cache.get("news") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("timestamp", [None, "yesterday", True, [1]])
    async def test_non_numeric_timestamp_reads_as_missing(self, cache, timestamp):
        cache.path_for("news").write_text(
            json.dumps({"timestamp": timestamp, "data": ["x"]}), encoding="utf-8",
        )
        assert await cache.get("news") is None
        assert await cache.get_entry("news") is None

    @pytest.mark.asyncio
    async def test_corrupt_file_is_overwritten(self, cache):
        cache.path_for("news").write_text("garbage", encoding="utf-8")
        assert await cache.put("news", ["fresh"])
        assert await cache.get("news") == ["fresh"]

    @pytest.mark.asyncio
    async def test_unserializable_payload_fails_softly(self, cache):
        assert not await cache.put("news", [object()])


class TestConstruction:
    def test_creates_directory(self, tmp_path):
        target = tmp_path / "a" / "b"
        JsonFileCache(target)
        assert target.is_dir()

    def test_unusable_directory(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(CacheUnavailableError):
            JsonFileCache(blocker / "cache")

    def test_build_from_config(self, tmp_path):
        class Cfg:
            directory = tmp_path / "c"

            def ttl_map(self):
                return {"news": 0.5}

        cache = build_cache(Cfg())
        assert cache.directory == tmp_path / "c"
        assert cache.ttl_for("news") == 0.5
