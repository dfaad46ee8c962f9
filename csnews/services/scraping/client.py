"""
Anti-detection HTTP client for HLTV scraping.

Combines rate-limited admission, per-caller identity sessions (consistent
browser headers, cookies, visit history), crawler identities for feeds and
sitemaps, and block detection. One ``fetch`` is one GET: no retries here,
failures surface as ``ScrapeError`` subclasses for the content pipeline to
escalate on.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, Mapping
from urllib.parse import urlparse

import httpx

from .cookies import CookieStore
from .detection import BlockType, detect_block
from .exceptions import DetectionError, FetchError, TransportError
from .profiles import ProfileCatalog, default_catalog
from .proxy import ProxyManager
from .rate_limiter import IntervalRateLimiter, RequestKind
from .registry import DEFAULT_SESSION_ID, SessionRegistry
from .session import PURGE_CHANCE

logger = logging.getLogger("csnews.services.scraping.client")

# Content kinds fetched with a crawler identity rather than a browser one
CRAWLER_CONTENT_KINDS = frozenset({"feed", "sitemap", "rss", "xml"})


class AntiDetectionClient:
    """HTTP client with session rotation, header simulation and rate limiting."""

    def __init__(
        self,
        *,
        registry: SessionRegistry,
        rate_limiter: IntervalRateLimiter,
        catalog: ProfileCatalog = default_catalog,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self.registry = registry
        self.rate_limiter = rate_limiter
        self._catalog = catalog
        self._timeout = timeout
        self._transport = transport
        self._sleep = sleep
        self._rng = rng or random.Random()
        # Cookies seen by any session, for diagnostics
        self.cookie_jar = CookieStore()

    def _select_headers(
        self,
        url: str,
        session,
        *,
        content_kind: str | None,
        headers: Mapping[str, str] | None,
        referer: str | None,
        include_origin: bool,
    ) -> dict[str, str]:
        if headers:
            return dict(headers)
        if content_kind and content_kind.lower() in CRAWLER_CONTENT_KINDS:
            crawler = self._catalog.select_crawler_profile(content_kind.lower(), self._rng)
            return crawler.build_headers()
        return session.prepare_request_headers(url, referer=referer, include_origin=include_origin)

    async def fetch(
        self,
        url: str,
        *,
        session_id: str | None = None,
        content_kind: str | None = None,
        request_kind: RequestKind | str = RequestKind.STANDARD,
        action_type: str = "pageLoad",
        headers: Mapping[str, str] | None = None,
        referer: str | None = None,
        include_origin: bool = False,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Fetch a URL under an identity session.

        Args:
            url: Target URL.
            session_id: Registry id of the identity to use (default session if None).
            content_kind: "feed"/"sitemap"/"rss"/"xml" switch to crawler headers.
            request_kind: Rate-limiter shaping class.
            action_type: Timing pattern for the per-session wait.
            headers: Explicit headers; bypass all header simulation.
            referer: Referer used when the session has no history to draw on.
            include_origin: Force an Origin header.
            timeout: Seconds; falls back to the client default.

        Returns:
            The successful httpx Response.

        Raises:
            DetectionError: 403 or a recognised challenge page.
            FetchError: Any other HTTP status >= 400.
            TransportError: Timeout, DNS or connection failure.
        """
        await self.rate_limiter.admission(request_kind)

        sid = session_id or DEFAULT_SESSION_ID
        session = self.registry.get(sid)

        request_headers = self._select_headers(
            url,
            session,
            content_kind=content_kind,
            headers=headers,
            referer=referer,
            include_origin=include_origin,
        )

        wait_ms = session.calculate_wait_time(action_type)
        if wait_ms > 0:
            await self._sleep(wait_ms / 1000.0)

        client_kwargs: dict = {
            "timeout": timeout or self._timeout,
            "follow_redirects": True,
        }
        if self._transport is not None:
            client_kwargs["transport"] = self._transport
        elif session.proxy is not None:
            client_kwargs["proxy"] = session.proxy_url()

        try:
            async with httpx.AsyncClient(**client_kwargs) as http:
                resp = await http.get(url, headers=request_headers)
        except httpx.HTTPError as exc:
            logger.warning(
                "Request failed for %s (session %s, identity %s): %s",
                url, sid, session.session_id, exc,
            )
            raise TransportError(url, exc, session_id=sid) from exc

        block = detect_block(resp.text, resp.status_code)
        if block != BlockType.NONE:
            logger.warning(
                "Bot detection triggered on %s (%s, HTTP %d, session %s, profile %s)",
                url, block.value, resp.status_code, sid, session.profile.name,
            )
            if session_id is not None:
                self.registry.discard(session_id)
            raise DetectionError(
                url,
                status_code=resp.status_code,
                block_type=block.value,
                session_id=sid,
            )

        if resp.status_code >= 400:
            logger.warning("HTTP %d for %s (session %s)", resp.status_code, url, sid)
            raise FetchError(url, status_code=resp.status_code, session_id=sid)

        session.record_visit(url, resp.headers)
        self.cookie_jar.absorb(resp.headers, urlparse(url).hostname or "")
        if self._rng.random() < PURGE_CHANCE:
            removed = self.cookie_jar.purge_expired()
            if removed:
                logger.debug("Purged %d expired cookies from the shared jar", removed)
        return resp

    def session_info(self) -> dict[str, dict]:
        return self.registry.session_info()


# ---------------------------------------------------------------------------
# Module-level singleton (lazy init)
# ---------------------------------------------------------------------------

_client: AntiDetectionClient | None = None


def build_scrape_client(cfg=None, proxy_cfg=None, **overrides) -> AntiDetectionClient:
    """Build a client from scraper and proxy settings."""
    from ...config import settings

    cfg = cfg or settings.scraper
    proxy_cfg = proxy_cfg or settings.proxies

    registry = SessionRegistry(
        max_sessions=cfg.max_sessions,
        session_ttl_minutes=cfg.session_ttl_minutes,
        rotation_enabled=cfg.use_session_rotation,
        proxy_manager=ProxyManager.from_config(proxy_cfg),
        use_proxies=cfg.use_proxies,
        proxy_type=cfg.proxy_type,
    )
    return AntiDetectionClient(
        registry=registry,
        rate_limiter=IntervalRateLimiter.from_config(cfg),
        timeout=cfg.default_timeout_ms / 1000.0,
        **overrides,
    )


def get_scrape_client() -> AntiDetectionClient:
    """Get or create the module-level scrape client singleton."""
    global _client
    if _client is None:
        _client = build_scrape_client()
    return _client
