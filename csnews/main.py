"""
csnews - HLTV news scraper command line.

Usage:
    # Latest headlines (cache first)
    csnews news

    # Upcoming matches / top teams
    csnews matches --limit 3
    csnews teams

    # Current tournament, optionally bypassing the cache
    csnews tournament --refresh

    # Refresh the ranking cache from a specific ranking date
    csnews rankings-update 2025/may/12

    # Inspect identities and timing, optionally with one live request
    csnews diagnose --url https://www.hltv.org/

    # Settings from a legacy config.json instead of env vars
    csnews --config config.json news

Output is JSON on stdout; logs go to stderr.
"""

# Load .env file FIRST, before any other imports
from pathlib import Path
from dotenv import load_dotenv
_env_root = Path(__file__).parent.parent
load_dotenv(_env_root / ".env", override=True)
load_dotenv(_env_root / ".env.local", override=True)

import argparse
import asyncio
import json
import logging
import random
import sys
from typing import Any, Optional

from .config import Settings, load_settings, settings
from .services.content.service import ContentService
from .services.scraping.client import AntiDetectionClient, build_scrape_client
from .services.scraping.exceptions import ScrapeError
from .services.scraping.fingerprints import TIMING_PATTERNS, sample_delay
from .storage.cache import build_cache

logger = logging.getLogger("csnews.main")


def _records(items: list) -> list[Any]:
    return [item.to_dict() if hasattr(item, "to_dict") else item for item in items]


def _build(cfg: Settings) -> tuple[AntiDetectionClient, ContentService]:
    client = build_scrape_client(cfg.scraper, cfg.proxies)
    service = ContentService(
        client,
        build_cache(cfg.cache),
        scraper_cfg=cfg.scraper,
        tournament_cfg=cfg.tournament,
    )
    return client, service


async def _diagnose(client: AntiDetectionClient, url: Optional[str]) -> dict[str, Any]:
    rng = random.Random()
    report: dict[str, Any] = {
        "sessions": client.session_info(),
        "delay_samples_ms": {
            name: [sample_delay(name, rng) for _ in range(5)] for name in TIMING_PATTERNS
        },
        "rate_limit": {
            "max_requests": client.rate_limiter.max_requests,
            "interval_seconds": client.rate_limiter.interval,
        },
    }
    if url:
        try:
            resp = await client.fetch(url, session_id="diagnose_session")
            report["fetch"] = {
                "url": str(resp.url),
                "status": resp.status_code,
                "bytes": len(resp.content),
                "content_type": resp.headers.get("content-type", ""),
            }
        except ScrapeError as e:
            report["fetch"] = {"url": url, "error": type(e).__name__, "message": str(e)}
        report["sessions"] = client.session_info()
        report["cookie_domains"] = client.cookie_jar.domains()
    return report


async def run(args: argparse.Namespace, cfg: Settings) -> Any:
    client, service = _build(cfg)

    if args.command == "news":
        return _records(await service.get_latest_news())
    if args.command == "matches":
        return _records(await service.get_upcoming_matches(args.limit))
    if args.command == "teams":
        return _records(await service.get_top_teams(args.limit))
    if args.command == "tournament":
        if args.refresh:
            return {"tournament": await service.force_update_tournament_cache()}
        return {"tournament": await service.get_current_tournament()}
    if args.command == "rankings-update":
        return _records(await service.update_team_rankings(args.date))
    if args.command == "diagnose":
        return await _diagnose(client, args.url)
    raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="csnews", description="Counter-Strike news from HLTV.org")
    parser.add_argument("--config", type=Path, help="Legacy JSON config file (config.json)")
    parser.add_argument("--log-level", help="Override CSNEWS_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("news", help="Latest news headlines")
    matches = sub.add_parser("matches", help="Upcoming matches")
    matches.add_argument("--limit", type=int, default=5)
    teams = sub.add_parser("teams", help="Top ranked teams")
    teams.add_argument("--limit", type=int, default=5)
    tournament = sub.add_parser("tournament", help="Current biggest tournament")
    tournament.add_argument("--refresh", action="store_true", help="Ignore the cached value")
    update = sub.add_parser("rankings-update", help="Refresh rankings from a ranking date")
    update.add_argument("date", help="Ranking date as YYYY/month/DD, e.g. 2025/may/12")
    diagnose = sub.add_parser("diagnose", help="Show identities, delays and optionally fetch a URL")
    diagnose.add_argument("--url", help="Fetch this URL once through the client")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = load_settings(args.config) if args.config else settings

    logging.basicConfig(
        level=getattr(logging, (args.log_level or cfg.log_level).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        result = asyncio.run(run(args, cfg))
    except ScrapeError as e:
        logger.error("%s", e)
        return 1

    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
