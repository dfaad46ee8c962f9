"""
Browser and crawler identity profiles for anti-detection.

Each browser profile is a consistent bundle: User-Agent string, Accept
headers, and the header extensions its family actually sends (client hints
for Chromium builds, fetch-metadata for Firefox). Crawler profiles are used
for machine-readable content (feeds, sitemaps) where a bot UA is expected.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ...utils.weighted import weighted_choice

_DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,image/apng,*/*;q=0.8"
_CHROME_ACCEPT = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,"
    "image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
)
_FIREFOX_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8"
_SAFARI_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


@dataclass(frozen=True)
class BrowserProfile:
    """A consistent browser identity bundle."""

    name: str
    family: str              # "Chrome", "Firefox", "Safari", "Edge"
    user_agent: str
    accept: str = _DEFAULT_ACCEPT
    accept_language: str = "en-US,en;q=0.9"
    sec_ch_ua: Optional[str] = None
    sec_ch_ua_platform: Optional[str] = None
    sec_ch_ua_mobile: Optional[str] = None
    sec_fetch_dest: Optional[str] = None
    sec_fetch_mode: Optional[str] = None
    sec_fetch_site: Optional[str] = None
    sec_fetch_user: Optional[str] = None
    weight: Optional[float] = None

    @property
    def is_mobile(self) -> bool:
        return (
            "mobile" in self.name.lower()
            or self.sec_ch_ua_mobile == "?1"
            or " Mobile" in self.user_agent
        )

    def build_headers(self, *, referer: str | None = None) -> dict[str, str]:
        """Build the base header set this browser sends on a navigation."""
        headers: dict[str, str] = {
            "User-Agent": self.user_agent,
            "Accept": self.accept or _DEFAULT_ACCEPT,
            "Accept-Language": self.accept_language or "en-US,en;q=0.9",
            "Cache-Control": "max-age=0",
            "Connection": "keep-alive",
            "Upgrade-Insecure-Requests": "1",
        }
        if referer:
            headers["Referer"] = referer

        # Chromium builds (Chrome, Edge) send client hints
        if self.sec_ch_ua:
            headers["sec-ch-ua"] = self.sec_ch_ua
            headers["sec-ch-ua-platform"] = self.sec_ch_ua_platform or '"Windows"'
            headers["sec-ch-ua-mobile"] = self.sec_ch_ua_mobile or "?0"

        # Firefox sends fetch metadata on top-level navigations
        if self.sec_fetch_dest:
            headers["Sec-Fetch-Dest"] = self.sec_fetch_dest
            headers["Sec-Fetch-Mode"] = self.sec_fetch_mode or "navigate"
            headers["Sec-Fetch-Site"] = self.sec_fetch_site or "none"
            if self.sec_fetch_user:
                headers["Sec-Fetch-User"] = self.sec_fetch_user

        return headers


@dataclass(frozen=True)
class CrawlerProfile:
    """A well-known crawler identity, selected by content-type affinity."""

    name: str
    user_agent: str
    accept: str = "application/xml,text/xml,application/rss+xml,*/*"
    accept_language: str = "en-US,en;q=0.5"
    for_types: frozenset[str] = field(default_factory=frozenset)

    def build_headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": self.accept,
            "Accept-Language": self.accept_language,
        }


BROWSER_PROFILES: tuple[BrowserProfile, ...] = (
    BrowserProfile(
        name="Chrome Windows",
        family="Chrome",
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
        accept=_CHROME_ACCEPT,
        sec_ch_ua='"Google Chrome";v="124", "Chromium";v="124", "Not-A.Brand";v="99"',
        sec_ch_ua_platform='"Windows"',
        sec_ch_ua_mobile="?0",
        weight=30,
    ),
    BrowserProfile(
        name="Chrome Windows (older)",
        family="Chrome",
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36",
        accept=_CHROME_ACCEPT,
        sec_ch_ua='"Google Chrome";v="121", "Chromium";v="121", "Not-A.Brand";v="99"',
        sec_ch_ua_platform='"Windows"',
        sec_ch_ua_mobile="?0",
        weight=25,
    ),
    BrowserProfile(
        name="Chrome macOS",
        family="Chrome",
        user_agent="Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
        accept=_CHROME_ACCEPT,
        sec_ch_ua='"Google Chrome";v="124", "Chromium";v="124", "Not-A.Brand";v="99"',
        sec_ch_ua_platform='"macOS"',
        sec_ch_ua_mobile="?0",
        weight=20,
    ),
    BrowserProfile(
        name="Firefox Windows",
        family="Firefox",
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:124.0) Gecko/20100101 Firefox/124.0",
        accept=_FIREFOX_ACCEPT,
        accept_language="en-US,en;q=0.5",
        sec_fetch_dest="document",
        sec_fetch_mode="navigate",
        sec_fetch_site="none",
        sec_fetch_user="?1",
        weight=15,
    ),
    BrowserProfile(
        name="Firefox macOS",
        family="Firefox",
        user_agent="Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:124.0) Gecko/20100101 Firefox/124.0",
        accept=_FIREFOX_ACCEPT,
        accept_language="en-US,en;q=0.5",
        sec_fetch_dest="document",
        sec_fetch_mode="navigate",
        sec_fetch_site="none",
        sec_fetch_user="?1",
        weight=10,
    ),
    BrowserProfile(
        name="Safari macOS",
        family="Safari",
        user_agent="Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Safari/605.1.15",
        accept=_SAFARI_ACCEPT,
        weight=10,
    ),
    BrowserProfile(
        name="Edge Windows",
        family="Edge",
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36 Edg/124.0.0.0",
        accept="text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7",
        sec_ch_ua='"Microsoft Edge";v="124", "Chromium";v="124", "Not-A.Brand";v="99"',
        sec_ch_ua_platform='"Windows"',
        sec_ch_ua_mobile="?0",
        weight=12,
    ),
    BrowserProfile(
        name="Chrome Android",
        family="Chrome",
        user_agent="Mozilla/5.0 (Linux; Android 13; SM-S908B) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.6367.104 Mobile Safari/537.36",
        accept=_CHROME_ACCEPT,
        sec_ch_ua='"Google Chrome";v="124", "Chromium";v="124", "Not-A.Brand";v="99"',
        sec_ch_ua_platform='"Android"',
        sec_ch_ua_mobile="?1",
        weight=5,
    ),
    BrowserProfile(
        name="Safari iOS",
        family="Safari",
        user_agent="Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1",
        accept=_SAFARI_ACCEPT,
        weight=5,
    ),
)


CRAWLER_PROFILES: tuple[CrawlerProfile, ...] = (
    CrawlerProfile(
        name="GoogleBot",
        user_agent="Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)",
        accept="text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        for_types=frozenset({"sitemap", "feed"}),
    ),
    CrawlerProfile(
        name="GoogleBot-News",
        user_agent="Googlebot-News",
        accept="application/xml, text/xml, */*",
        for_types=frozenset({"sitemap"}),
    ),
    CrawlerProfile(
        name="BingBot",
        user_agent="Mozilla/5.0 (compatible; bingbot/2.0; +http://www.bing.com/bingbot.htm)",
        accept="text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        for_types=frozenset({"sitemap", "feed"}),
    ),
    CrawlerProfile(
        name="RSS Reader",
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36 (RSS Reader)",
        accept="application/rss+xml, application/xml, text/xml, */*",
        for_types=frozenset({"feed"}),
    ),
)


REFERRERS: tuple[str, ...] = (
    # Search engines
    "https://www.google.com/",
    "https://www.google.com/search?q=hltv+counter+strike+news",
    "https://www.google.com/search?q=csgo+tournament+schedule",
    "https://www.google.com/search?q=hltv+match+results",
    "https://www.bing.com/search?q=hltv+cs2+news",
    "https://www.bing.com/search?q=counter+strike+rankings",
    "https://duckduckgo.com/?q=hltv+cs2+news",
    "https://search.yahoo.com/search?p=hltv+counter+strike+news",
    # Social
    "https://www.reddit.com/r/GlobalOffensive/",
    "https://www.reddit.com/r/GlobalOffensive/comments/abc123/",
    "https://twitter.com/",
    "https://facebook.com/",
    # Direct
    "https://www.hltv.org/",
    "https://www.hltv.org/matches",
    "https://www.hltv.org/news",
    # Gaming
    "https://www.faceit.com/",
    "https://www.esea.net/",
    "https://liquipedia.net/counterstrike/",
    "https://www.vlr.gg/",
    # Direct navigation, no referrer
    "",
)


class ProfileCatalog:
    """Selects browser profiles by weight and crawler profiles by affinity."""

    def __init__(
        self,
        browsers: Sequence[BrowserProfile] = BROWSER_PROFILES,
        crawlers: Sequence[CrawlerProfile] = CRAWLER_PROFILES,
        referrers: Sequence[str] = REFERRERS,
    ) -> None:
        if not browsers or not crawlers:
            raise ValueError("ProfileCatalog needs at least one browser and one crawler profile")
        self.browsers = tuple(browsers)
        self.crawlers = tuple(crawlers)
        self.referrers = tuple(referrers) or ("",)

    def select_browser_profile(self, rng: random.Random | None = None) -> BrowserProfile:
        """Weighted random browser profile (unset weights count as 1)."""
        return weighted_choice(((p, p.weight) for p in self.browsers), rng)

    def select_crawler_profile(
        self, content_kind: str, rng: random.Random | None = None
    ) -> CrawlerProfile:
        """Uniform choice among crawlers declaring ``content_kind``.

        Falls back to the first crawler profile when none match.
        """
        matches = [p for p in self.crawlers if content_kind in p.for_types]
        if not matches:
            return self.crawlers[0]
        return (rng or random).choice(matches)

    def random_referrer(self, rng: random.Random | None = None) -> str:
        return (rng or random).choice(self.referrers)

    def find_by_family(self, family: str) -> BrowserProfile | None:
        """First browser profile of the given family, e.g. ``"Firefox"``."""
        for profile in self.browsers:
            if profile.family.lower() == family.lower():
                return profile
        return None


default_catalog = ProfileCatalog()
