"""
Block-signal detection for scraped responses.

Recognises a bare 403, Cloudflare challenge pages and DataDome
interstitials. Any non-NONE result is treated as a detection event.
"""

from __future__ import annotations

import enum


class BlockType(enum.Enum):
    NONE = "none"
    FORBIDDEN = "forbidden"      # plain HTTP 403
    CLOUDFLARE = "cloudflare"
    DATADOME = "datadome"


def detect_block(response_text: str, status_code: int) -> BlockType:
    """Inspect a response for signs that the request was blocked.

    Args:
        response_text: Body of the response.
        status_code: HTTP status code.

    Returns:
        BlockType indicating which block was found (or NONE).
    """
    body = (response_text or "")[:20_000].lower()

    # DataDome serves its JS challenge from captcha-delivery.com, sometimes with a 200
    if "captcha-delivery.com" in body and "var dd=" in body:
        return BlockType.DATADOME

    if status_code in (403, 503) and "cloudflare" in body and (
        "attention required" in body or "just a moment" in body or "cf-chl" in body
    ):
        return BlockType.CLOUDFLARE

    if status_code == 403:
        return BlockType.FORBIDDEN

    return BlockType.NONE
