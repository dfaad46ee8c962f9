"""
Per-domain cookie jar with browser-like matching.

Cookies are bucketed by the domain they were stored under and keyed by
(domain, path, name); storing a cookie with an existing key replaces it.
Expired cookies are never returned and are dropped by ``purge_expired``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional
from urllib.parse import urlparse

from dateutil import parser as dateutil_parser

logger = logging.getLogger("csnews.services.scraping.cookies")


@dataclass
class Cookie:
    name: str
    value: str
    domain: str
    path: str = "/"
    expires: Optional[float] = None  # epoch seconds
    secure: bool = False
    http_only: bool = False
    same_site: Optional[str] = None

    def is_expired(self, now: float) -> bool:
        return self.expires is not None and self.expires <= now


def _set_cookie_values(headers: Any) -> list[str]:
    """Collect raw Set-Cookie values from a header mapping.

    Accepts ``httpx.Headers`` (multi-valued) or a plain mapping whose
    ``set-cookie`` entry is a string or a list of strings.
    """
    if headers is None:
        return []
    get_list = getattr(headers, "get_list", None)
    if callable(get_list):
        return [v for v in get_list("set-cookie") if v]

    raw: Any = None
    if isinstance(headers, Mapping):
        for key, value in headers.items():
            if str(key).lower() == "set-cookie":
                raw = value
                break
    if not raw:
        return []
    if isinstance(raw, str):
        return [raw]
    return [v for v in raw if v]


class CookieStore:
    """Cookie jar for one identity (or the shared cross-session jar)."""

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._cookies: dict[str, list[Cookie]] = {}

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._cookies.values())

    def parse(self, set_cookie: str, domain: str) -> Cookie | None:
        """Parse one Set-Cookie directive received from ``domain``."""
        parts = [part.strip() for part in set_cookie.split(";")]
        name, sep, value = parts[0].partition("=")
        name = name.strip()
        if not name or not sep:
            return None

        cookie = Cookie(name=name, value=value.strip(), domain=domain.lower())
        max_age: Optional[int] = None

        for part in parts[1:]:
            if not part:
                continue
            attr, _, attr_value = part.partition("=")
            attr = attr.strip().lower()
            attr_value = attr_value.strip()

            if attr == "domain":
                cookie.domain = (attr_value or domain).lower()
            elif attr == "path":
                cookie.path = attr_value or "/"
            elif attr == "expires":
                try:
                    cookie.expires = dateutil_parser.parse(attr_value).timestamp()
                except (ValueError, OverflowError):
                    logger.debug("Ignoring unparseable cookie expiry %r", attr_value)
            elif attr == "max-age":
                try:
                    max_age = int(attr_value)
                except ValueError:
                    logger.debug("Ignoring invalid cookie max-age %r", attr_value)
            elif attr == "secure":
                cookie.secure = True
            elif attr == "httponly":
                cookie.http_only = True
            elif attr == "samesite":
                cookie.same_site = attr_value.lower() or None

        # Max-Age takes precedence over Expires regardless of order
        if max_age is not None:
            cookie.expires = self._clock() + max_age

        return cookie

    def absorb(self, response_headers: Any, domain: str) -> int:
        """Store every cookie set by a response from ``domain``.

        Returns:
            Number of cookies stored.
        """
        stored = 0
        for raw in _set_cookie_values(response_headers):
            cookie = self.parse(raw, domain)
            if cookie is not None:
                self.set(cookie)
                stored += 1
        return stored

    def set(self, cookie: Cookie) -> None:
        """Upsert a cookie keyed by (domain, path, name)."""
        bucket = self._cookies.setdefault(cookie.domain, [])
        for i, existing in enumerate(bucket):
            if existing.name == cookie.name and existing.path == cookie.path:
                bucket[i] = cookie
                return
        bucket.append(cookie)

    def matching(self, hostname: str, path: str = "/", secure: bool = True) -> list[Cookie]:
        """Cookies applicable to a request for ``hostname`` + ``path``."""
        now = self._clock()
        labels = hostname.lower().split(".")
        matches: list[Cookie] = []
        seen_domains: set[str] = set()

        # Exact host, then each parent suffix down to the registrable domain
        for i in range(max(len(labels) - 1, 1)):
            candidate = ".".join(labels[i:])
            for cookie_domain in (candidate, "." + candidate):
                if cookie_domain in seen_domains:
                    continue
                seen_domains.add(cookie_domain)
                for cookie in self._cookies.get(cookie_domain, ()):
                    if cookie.is_expired(now):
                        continue
                    if cookie.secure and not secure:
                        continue
                    if not path.startswith(cookie.path):
                        continue
                    matches.append(cookie)
        return matches

    def cookie_header_for(self, url: str) -> str:
        """Build the ``Cookie`` header value for a request to ``url``."""
        parsed = urlparse(url)
        cookies = self.matching(
            parsed.hostname or "",
            parsed.path or "/",
            secure=parsed.scheme == "https",
        )
        return "; ".join(f"{c.name}={c.value}" for c in cookies)

    def purge_expired(self) -> int:
        """Drop expired cookies and empty domain buckets.

        Returns:
            Number of cookies removed.
        """
        now = self._clock()
        removed = 0
        for domain in list(self._cookies):
            kept = [c for c in self._cookies[domain] if not c.is_expired(now)]
            removed += len(self._cookies[domain]) - len(kept)
            if kept:
                self._cookies[domain] = kept
            else:
                del self._cookies[domain]
        return removed

    def domains(self) -> list[str]:
        return list(self._cookies)

    def cookies_for_domain(self, domain: str) -> list[Cookie]:
        return list(self._cookies.get(domain, ()))

    def all(self) -> Iterable[Cookie]:
        for bucket in self._cookies.values():
            yield from bucket
