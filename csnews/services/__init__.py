"""
Services for csnews.

This module provides:
- scraping: the anti-detection HTTP client and its identity/session engine
- content: cache-first retrieval of news, matches, rankings and tournaments
"""

from .content import ContentService, get_content_service
from .scraping import AntiDetectionClient, get_scrape_client

__all__ = [
    "AntiDetectionClient",
    "get_scrape_client",
    "ContentService",
    "get_content_service",
]
