"""
Bounded pool of identity sessions.

Sessions are looked up by caller-chosen ids ("default", "feed_session", ...).
The registry rotates sessions that have outlived their behaviour bounds and
evicts by capacity (least recently visited first) and by age.
"""

from __future__ import annotations

import logging
import random
import time
import uuid
from typing import Any, Callable, Iterable, Optional

from .profiles import BrowserProfile, ProfileCatalog, default_catalog
from .proxy import ProxyManager
from .session import IdentitySession

logger = logging.getLogger("csnews.services.scraping.registry")

DEFAULT_SESSION_ID = "default"


class SessionRegistry:
    """Creates, reuses, rotates and evicts identity sessions."""

    def __init__(
        self,
        *,
        max_sessions: int = 5,
        session_ttl_minutes: float = 30,
        rotation_enabled: bool = True,
        proxy_manager: ProxyManager | None = None,
        use_proxies: bool = False,
        proxy_type: str = "standard",
        catalog: ProfileCatalog = default_catalog,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
        session_factory: Optional[Callable[..., IdentitySession]] = None,
    ) -> None:
        self.max_sessions = max_sessions
        self.session_ttl_minutes = session_ttl_minutes
        self.rotation_enabled = rotation_enabled
        self._proxy_manager = proxy_manager
        self._use_proxies = use_proxies
        self._proxy_type = proxy_type
        self._catalog = catalog
        self._rng = rng or random.Random()
        self._clock = clock
        self._session_factory = session_factory or IdentitySession

        self._sessions: dict[str, IdentitySession] = {}
        self.active_sessions = 0

        self.create(DEFAULT_SESSION_ID)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def peek(self, session_id: str) -> IdentitySession | None:
        """Return a session without triggering rotation."""
        return self._sessions.get(session_id)

    def get(self, session_id: str = DEFAULT_SESSION_ID, force_new: bool = False) -> IdentitySession:
        """Existing session for ``session_id``, or a fresh one.

        A fresh identity replaces the old one when the id is unknown,
        ``force_new`` is set, or rotation is enabled and the session asks
        to rotate.
        """
        session = self._sessions.get(session_id)
        if session is None or force_new:
            return self._sessions[self.create(session_id)]

        if self.rotation_enabled and session.should_rotate():
            logger.info(
                "Rotating session %s (identity %s, %d visits)",
                session_id, session.session_id, session.visit_count,
            )
            return self._sessions[self.create(session_id)]

        return session

    def create(
        self,
        session_id: str | None = None,
        *,
        profile: BrowserProfile | None = None,
    ) -> str:
        """Install a new identity under ``session_id`` (generated if omitted).

        Returns:
            The id the session was registered under.
        """
        sid = session_id or f"session_{uuid.uuid4().hex[:7]}"
        proxy = None
        if self._use_proxies and self._proxy_manager is not None:
            proxy = self._proxy_manager.get_proxy(self._proxy_type)

        session = self._session_factory(
            profile,
            proxy=proxy,
            catalog=self._catalog,
            rng=random.Random(self._rng.random()),
            clock=self._clock,
        )

        if sid not in self._sessions:
            self.active_sessions += 1
        self._sessions[sid] = session
        logger.debug("Created session %s with %s profile", sid, session.profile.name)

        if self.active_sessions > self.max_sessions:
            self.cleanup(keep=(sid,))
        return sid

    def discard(self, session_id: str) -> bool:
        """Drop a session so the next lookup builds a fresh identity."""
        if self._sessions.pop(session_id, None) is None:
            return False
        self.active_sessions -= 1
        return True

    def cleanup(self, keep: Iterable[str] = ()) -> list[str]:
        """Evict by capacity (oldest visit first), then by age.

        The default session and any id in ``keep`` are never evicted.

        Returns:
            Evicted session ids.
        """
        protected = {DEFAULT_SESSION_ID, *keep}
        evicted: list[str] = []
        by_last_visit = sorted(
            (sid for sid in self._sessions if sid not in protected),
            key=lambda sid: self._sessions[sid].last_visit_time,
        )
        for sid in by_last_visit:
            if self.active_sessions <= self.max_sessions:
                break
            self.discard(sid)
            evicted.append(sid)

        now = self._clock()
        for sid in list(self._sessions):
            if sid in protected:
                continue
            age_minutes = (now - self._sessions[sid].session_start) / 60
            if age_minutes > self.session_ttl_minutes:
                self.discard(sid)
                evicted.append(sid)

        if evicted:
            logger.debug("Evicted sessions: %s", ", ".join(evicted))
        return evicted

    def session_info(self) -> dict[str, dict[str, Any]]:
        return {sid: s.session_info() for sid, s in self._sessions.items()}
