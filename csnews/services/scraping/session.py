"""
Identity session: one simulated browsing client.

Bundles a fingerprint profile, a cookie jar, derived device metadata,
navigation/session behaviour, and the visit history used to build
context-aware request headers.
"""

from __future__ import annotations

import logging
import random
import time
import uuid
from typing import Any, Callable, Optional
from urllib.parse import urlparse

from .cookies import CookieStore
from .fingerprints import (
    GPU_VENDORS,
    pick_navigation_pattern,
    pick_session_behavior,
    sample_delay,
    screen_profile_for,
    tls_fingerprint_for,
    webgl_profile_for,
)
from .profiles import BrowserProfile, ProfileCatalog, default_catalog
from .proxy import ProxyDescriptor

logger = logging.getLogger("csnews.services.scraping.session")

HISTORY_REFERER_CHANCE = 0.8
PURGE_CHANCE = 0.1
ROTATION_CHANCE = 0.05
# Seconds since the last request after which no extra wait is added
NATURAL_PAUSE_SECONDS = 2.0


class IdentitySession:
    """A simulated browser identity with its own cookies and behaviour."""

    def __init__(
        self,
        profile: BrowserProfile | None = None,
        *,
        session_id: str | None = None,
        proxy: ProxyDescriptor | None = None,
        catalog: ProfileCatalog = default_catalog,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._rng = rng or random.Random()
        self._clock = clock
        self._catalog = catalog

        self.profile = profile or catalog.select_browser_profile(self._rng)
        self.session_id = session_id or uuid.uuid4().hex[:13]
        self.cookies = CookieStore(clock=clock)

        self.device_type = "mobile" if self.profile.is_mobile else "desktop"
        self.screen = screen_profile_for(self.device_type, self._rng)
        self.gpu_vendor = self._rng.choice(GPU_VENDORS)
        self.webgl = webgl_profile_for(self.gpu_vendor)
        self.tls_fingerprint = tls_fingerprint_for(self.profile.family, self._rng)
        self.navigation_pattern = pick_navigation_pattern(self._rng).name
        self.session_behavior = pick_session_behavior(self._rng)

        self.proxy = proxy
        self.headers = self.build_headers()

        self.visit_history: list[str] = []
        self.visit_count = 0
        self.session_start = self._clock()
        self.last_visit_time = self.session_start
        self.last_request_time = 0.0

    def build_headers(self) -> dict[str, str]:
        """Base headers for this identity, with a randomly chosen referrer."""
        referer = self._catalog.random_referrer(self._rng)
        return self.profile.build_headers(referer=referer or None)

    def prepare_request_headers(
        self,
        url: str,
        *,
        referer: str | None = None,
        include_origin: bool = False,
    ) -> dict[str, str]:
        """Headers for a specific request, shaped by this session's history."""
        parsed = urlparse(url)
        headers = dict(self.headers)

        if self.visit_history and self._rng.random() < HISTORY_REFERER_CHANCE:
            headers["Referer"] = self.visit_history[-1]
        elif referer:
            headers["Referer"] = referer

        cookie_header = self.cookies.cookie_header_for(url)
        if cookie_header:
            headers["Cookie"] = cookie_header

        if include_origin or "api" in parsed.path.lower():
            headers["Origin"] = f"{parsed.scheme}://{parsed.netloc}"

        return headers

    def calculate_wait_time(self, action_type: str = "pageLoad") -> int:
        """Milliseconds to pause before the next request.

        Zero when enough time has already passed since the previous request.
        """
        if self._clock() - self.last_request_time > NATURAL_PAUSE_SECONDS:
            return 0
        return sample_delay(action_type, self._rng)

    def record_visit(self, url: str, response_headers: Any = None) -> None:
        """Append a visit and absorb any cookies the response set."""
        now = self._clock()
        self.visit_history.append(url)
        self.visit_count += 1
        self.last_visit_time = now
        self.last_request_time = now

        if response_headers is not None:
            domain = urlparse(url).hostname or ""
            self.cookies.absorb(response_headers, domain)

        if self._rng.random() < PURGE_CHANCE:
            removed = self.cookies.purge_expired()
            if removed:
                logger.debug("Session %s purged %d expired cookies", self.session_id, removed)

    def exceeds_behavior_bounds(self) -> bool:
        """Deterministic half of the rotation decision."""
        behavior = self.session_behavior
        if self.visit_count >= behavior.max_page_views:
            return True
        elapsed_ms = (self._clock() - self.session_start) * 1000
        return elapsed_ms >= behavior.max_duration_ms

    def should_rotate(self) -> bool:
        """True when bounds are exceeded, or on an independent 5% draw."""
        if self.exceeds_behavior_bounds():
            return True
        return self._rng.random() < ROTATION_CHANCE

    def proxy_url(self) -> Optional[str]:
        return self.proxy.url if self.proxy else None

    def session_info(self) -> dict[str, Any]:
        """Summary for logging and diagnostics."""
        return {
            "session_id": self.session_id,
            "browser": self.profile.name,
            "user_agent": self.profile.user_agent,
            "visit_count": self.visit_count,
            "session_duration_ms": int((self._clock() - self.session_start) * 1000),
            "cookie_domains": self.cookies.domains(),
            "navigation_pattern": self.navigation_pattern,
            "session_behavior": self.session_behavior.name,
            "proxy": self.proxy.redacted() if self.proxy else "none",
            "screen": f"{self.screen.width}x{self.screen.height}",
            "webgl_renderer": self.webgl.renderer,
            "tls_ja3_hash": self.tls_fingerprint.ja3_hash,
        }
