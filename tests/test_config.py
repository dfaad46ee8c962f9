"""
Tests for settings loading, including the legacy camelCase config document.
"""

import json

import pytest

from csnews.config import CacheConfig, ScraperConfig, Settings, load_settings, settings_from_document


class TestDefaults:
    def test_scraper_defaults(self):
        cfg = ScraperConfig()
        assert cfg.max_requests_per_interval == 4
        assert cfg.request_interval_ms == 60_000
        assert cfg.max_sessions == 5
        assert cfg.session_ttl_minutes == 30

    def test_cache_ttl_map(self):
        ttl = CacheConfig().ttl_map()
        assert set(ttl) == {"news", "matches", "teams", "tournament"}
        assert ttl["tournament"] == 6.0

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("CSNEWS_SCRAPER_MAX_SESSIONS", "9")
        assert ScraperConfig().max_sessions == 9


class TestLegacyDocument:
    def test_camel_case_keys_are_mapped(self):
        settings = settings_from_document({
            "scraper": {
                "maxRequestsPerInterval": 10,
                "requestIntervalMs": 30_000,
                "useProxies": True,
                "proxyType": "residential",
                "maxSessions": 3,
                "newsApiKey": "abc",
            }
        })
        assert settings.scraper.max_requests_per_interval == 10
        assert settings.scraper.request_interval_ms == 30_000
        assert settings.scraper.use_proxies
        assert settings.scraper.proxy_type == "residential"
        assert settings.scraper.max_sessions == 3
        assert settings.scraper.newsapi_key == "abc"

    def test_cache_ttl_applies_to_record_datasets(self):
        settings = settings_from_document({"scraper": {"cacheTTLHours": 2, "tournamentCacheTTLHours": 12}})
        assert settings.cache.news_ttl_hours == 2
        assert settings.cache.matches_ttl_hours == 2
        assert settings.cache.teams_ttl_hours == 2
        assert settings.cache.tournament_ttl_hours == 12

    def test_unknown_keys_are_ignored(self):
        settings = settings_from_document({"scraper": {"somethingElse": 1}, "ui": {}})
        assert settings.scraper.max_requests_per_interval == 4

    def test_proxy_pools(self):
        settings = settings_from_document({
            "proxies": {"standard": [{"host": "10.0.0.1", "port": 8080}]},
        })
        assert settings.proxies.standard[0].host == "10.0.0.1"
        assert settings.proxies.residential == []

    def test_tournament_section(self):
        settings = settings_from_document({"tournament": {"known_events": {"2025-11": "Budapest Major"}}})
        assert settings.tournament.known_events == {"2025-11": "Budapest Major"}
        assert settings.tournament.mention_patterns


class TestLoadSettings:
    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "config.json")
        assert isinstance(settings, Settings)
        assert settings.scraper.max_requests_per_interval == 4

    def test_reads_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"scraper": {"maxSessions": 2}}))
        assert load_settings(path).scraper.max_sessions == 2

    @pytest.mark.parametrize(
        "content",
        [
            "{not json",
            json.dumps({"scraper": {"maxSessions": "lots"}}),
            json.dumps({"scraper": {"requestIntervalMs": 10}}),
        ],
    )
    def test_invalid_file_gives_defaults(self, tmp_path, content):
        path = tmp_path / "config.json"
        path.write_text(content)
        settings = load_settings(path)
        assert settings.scraper.max_sessions == 5
        assert settings.scraper.request_interval_ms == 60_000
