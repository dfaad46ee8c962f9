"""
HLTV scraping with anti-detection.

Provides an httpx-based client with simulated browser identities, cookie
persistence, session rotation, proxy assignment and sliding-window rate
limiting.
"""

from .client import AntiDetectionClient, build_scrape_client, get_scrape_client
from .cookies import Cookie, CookieStore
from .detection import BlockType, detect_block
from .exceptions import DetectionError, FetchError, ParseError, ScrapeError, TransportError
from .fingerprints import sample_delay
from .profiles import BrowserProfile, CrawlerProfile, ProfileCatalog, default_catalog
from .proxy import ProxyDescriptor, ProxyManager
from .rate_limiter import IntervalRateLimiter, RequestKind
from .registry import DEFAULT_SESSION_ID, SessionRegistry
from .session import IdentitySession

__all__ = [
    "AntiDetectionClient",
    "build_scrape_client",
    "get_scrape_client",
    "Cookie",
    "CookieStore",
    "BlockType",
    "detect_block",
    "ScrapeError",
    "DetectionError",
    "FetchError",
    "TransportError",
    "ParseError",
    "sample_delay",
    "BrowserProfile",
    "CrawlerProfile",
    "ProfileCatalog",
    "default_catalog",
    "ProxyDescriptor",
    "ProxyManager",
    "IntervalRateLimiter",
    "RequestKind",
    "DEFAULT_SESSION_ID",
    "SessionRegistry",
    "IdentitySession",
]
