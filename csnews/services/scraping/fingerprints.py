"""
Device, TLS and behavioural fingerprint data for identity sessions.

The TLS and WebGL descriptors are metadata only: they bias header
construction and are reported in session diagnostics, no TLS handshake
is altered. Timing patterns drive the human-like delays between requests.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field

from ...utils.weighted import weighted_choice


@dataclass(frozen=True)
class TLSFingerprint:
    ja3: str
    ja3_hash: str
    tls_version: str
    cipher_suite_order: tuple[str, ...]


@dataclass(frozen=True)
class ScreenResolution:
    width: int
    height: int


@dataclass(frozen=True)
class WebGLProfile:
    renderer: str
    vendor: str
    webgl_version: str


@dataclass(frozen=True)
class NavigationPattern:
    name: str
    description: str
    weight: float


@dataclass(frozen=True)
class SessionBehavior:
    """Visit-count and duration bounds for one kind of browsing session."""

    name: str
    min_page_views: int
    max_page_views: int
    min_duration_ms: int
    max_duration_ms: int
    weight: float


@dataclass(frozen=True)
class TimingPattern:
    """A delay distribution clamped to [min_ms, max_ms]."""

    min_ms: int
    max_ms: int
    distribution: str = "uniform"     # uniform | normal | exponential | mixed
    mean: float = 0.0
    std_dev: float = 0.0
    rate: float = 0.0
    ranges: tuple[tuple[float, int, int], ...] = field(default_factory=tuple)  # (weight, min, max)


_ECDHE_AES128_FIRST = (
    "ECDHE-ECDSA-AES128-GCM-SHA256", "ECDHE-RSA-AES128-GCM-SHA256",
    "ECDHE-ECDSA-AES256-GCM-SHA384", "ECDHE-RSA-AES256-GCM-SHA384",
)
_ECDHE_AES256_FIRST = (
    "ECDHE-ECDSA-AES256-GCM-SHA384", "ECDHE-RSA-AES256-GCM-SHA384",
    "ECDHE-ECDSA-AES128-GCM-SHA256", "ECDHE-RSA-AES128-GCM-SHA256",
)

TLS_FINGERPRINTS: dict[str, tuple[TLSFingerprint, ...]] = {
    "Chrome": (
        TLSFingerprint(
            ja3="771,4865-4866-4867-49195-49199-49196-49200-52393-52392-49171-49172-156-157-47-53,0-23-65281-10-11-35-16-5-13-18-51-45-43-27-17513-21,29-23-24,0",
            ja3_hash="cd08e31494f9531f560d64c695473da9",
            tls_version="1.2",
            cipher_suite_order=_ECDHE_AES128_FIRST,
        ),
        TLSFingerprint(
            ja3="771,4865-4866-4867-49195-49199-49196-49200-52393-52392-49171-49172-156-157-47-53,0-23-65281-10-11-35-16-5-13-18-51-45-43-27-17513,29-23-24,0",
            ja3_hash="2a1eb1dc58298222bda4e6755baf4ba1",
            tls_version="1.2",
            cipher_suite_order=_ECDHE_AES128_FIRST,
        ),
    ),
    "Firefox": (
        TLSFingerprint(
            ja3="771,4865-4867-4866-49195-49199-52393-52392-49196-49200-49162-49161-49171-49172-156-157-47-53,0-23-65281-10-11-35-16-5-13-28-51-45-43-27,29-23-24-25-256-257,0",
            ja3_hash="fecf01588d119c4bfb2f891066553c25",
            tls_version="1.2",
            cipher_suite_order=_ECDHE_AES256_FIRST,
        ),
        TLSFingerprint(
            ja3="771,4865-4867-4866-49195-49199-52393-52392-49196-49200-49162-49161-49171-49172-156-157-47-53,0-23-65281-10-11-35-16-5-13-28-51-45-43-27,29-23-24-25-256-257,0",
            ja3_hash="1c1a57365c8f985432f52fd89067f98f",
            tls_version="1.2",
            cipher_suite_order=_ECDHE_AES256_FIRST,
        ),
    ),
    "Safari": (
        TLSFingerprint(
            ja3="771,4865-4866-4867-49195-49196-52393-49199-49200-52392-49171-49172-156-157-47-53,0-23-65281-10-11-35-16-5-13-28-51-45-43,29-23-24,0",
            ja3_hash="4364ecf023b4d78b10f485d6f6bc52d3",
            tls_version="1.2",
            cipher_suite_order=_ECDHE_AES256_FIRST,
        ),
    ),
    "Edge": (
        TLSFingerprint(
            ja3="771,4865-4866-4867-49195-49199-49196-49200-52393-52392-49171-49172-156-157-47-53,0-23-65281-10-11-35-16-5-13-18-51-45-43-27-17513,29-23-24,0",
            ja3_hash="27f3738d45ca05015a7c4057a3095b6f",
            tls_version="1.2",
            cipher_suite_order=_ECDHE_AES128_FIRST,
        ),
    ),
}

SCREEN_PROFILES: dict[str, tuple[ScreenResolution, ...]] = {
    "desktop": (
        ScreenResolution(1920, 1080),
        ScreenResolution(1366, 768),
        ScreenResolution(1536, 864),
        ScreenResolution(1440, 900),
        ScreenResolution(2560, 1440),
        ScreenResolution(3840, 2160),
    ),
    "mobile": (
        ScreenResolution(390, 844),
        ScreenResolution(414, 896),
        ScreenResolution(375, 812),
        ScreenResolution(360, 780),
        ScreenResolution(412, 915),
        ScreenResolution(360, 800),
    ),
}

WEBGL_PROFILES: dict[str, WebGLProfile] = {
    "intel": WebGLProfile(
        renderer="ANGLE (Intel, Intel(R) UHD Graphics Direct3D11 vs_5_0 ps_5_0, D3D11)",
        vendor="Google Inc. (Intel)",
        webgl_version="WebGL 2.0 (OpenGL ES 3.0 Chromium)",
    ),
    "nvidia": WebGLProfile(
        renderer="ANGLE (NVIDIA, NVIDIA GeForce RTX 3070 Direct3D11 vs_5_0 ps_5_0, D3D11)",
        vendor="Google Inc. (NVIDIA)",
        webgl_version="WebGL 2.0 (OpenGL ES 3.0 Chromium)",
    ),
    "amd": WebGLProfile(
        renderer="ANGLE (AMD, AMD Radeon RX 6800 XT Direct3D11 vs_5_0 ps_5_0, D3D11)",
        vendor="Google Inc. (AMD)",
        webgl_version="WebGL 2.0 (OpenGL ES 3.0 Chromium)",
    ),
    "apple": WebGLProfile(
        renderer="Apple M1",
        vendor="Apple Inc.",
        webgl_version="WebGL 2.0",
    ),
}

# Vendors drawn for new sessions; "apple" is only reachable by explicit lookup
GPU_VENDORS: tuple[str, ...] = ("intel", "nvidia", "amd")

TIMING_PATTERNS: dict[str, TimingPattern] = {
    "pageLoad": TimingPattern(
        min_ms=800, max_ms=3000, distribution="normal", mean=1500, std_dev=400,
    ),
    "resourceFetch": TimingPattern(
        min_ms=50, max_ms=500, distribution="exponential", rate=0.005,
    ),
    "subsequentRequests": TimingPattern(
        min_ms=2000, max_ms=10000, distribution="mixed",
        ranges=((7, 2000, 4000), (3, 5000, 10000)),
    ),
}

NAVIGATION_PATTERNS: tuple[NavigationPattern, ...] = (
    NavigationPattern("depth-first", "Follows links deeply before exploring breadth", 2),
    NavigationPattern("breadth-first", "Explores many links at the same level before going deeper", 4),
    NavigationPattern("random-walk", "Random selection of links to follow", 1),
    NavigationPattern("targeted", "Focuses on specific content types or keywords", 3),
)

SESSION_BEHAVIORS: tuple[SessionBehavior, ...] = (
    SessionBehavior("short-visit", 1, 3, 10_000, 60_000, 2),
    SessionBehavior("medium-visit", 3, 10, 60_000, 300_000, 5),
    SessionBehavior("deep-visit", 10, 30, 300_000, 1_800_000, 3),
)


def tls_fingerprint_for(family: str, rng: random.Random | None = None) -> TLSFingerprint:
    """Random TLS descriptor for a browser family (Chrome when unknown)."""
    candidates = TLS_FINGERPRINTS.get(family) or TLS_FINGERPRINTS["Chrome"]
    return (rng or random).choice(candidates)


def screen_profile_for(device_type: str = "desktop", rng: random.Random | None = None) -> ScreenResolution:
    candidates = SCREEN_PROFILES.get(device_type) or SCREEN_PROFILES["desktop"]
    return (rng or random).choice(candidates)


def webgl_profile_for(gpu_vendor: str = "intel") -> WebGLProfile:
    return WEBGL_PROFILES.get(gpu_vendor) or WEBGL_PROFILES["intel"]


def pick_navigation_pattern(rng: random.Random | None = None) -> NavigationPattern:
    return weighted_choice(((p, p.weight) for p in NAVIGATION_PATTERNS), rng)


def pick_session_behavior(rng: random.Random | None = None) -> SessionBehavior:
    return weighted_choice(((b, b.weight) for b in SESSION_BEHAVIORS), rng)


def sample_delay(pattern_name: str = "pageLoad", rng: random.Random | None = None) -> int:
    """Draw a delay in milliseconds from a named timing pattern.

    Whatever the distribution, the result is clamped to the pattern's
    [min_ms, max_ms]. Unknown pattern names use ``pageLoad``.
    """
    rng = rng or random
    pattern = TIMING_PATTERNS.get(pattern_name) or TIMING_PATTERNS["pageLoad"]

    if pattern.distribution == "normal":
        # Box-Muller; 1 - random() keeps u1 in (0, 1] so log() is defined
        u1 = 1.0 - rng.random()
        u2 = rng.random()
        z0 = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
        delay = round(z0 * pattern.std_dev + pattern.mean)
    elif pattern.distribution == "exponential":
        delay = round(-math.log(1.0 - rng.random()) / pattern.rate)
    elif pattern.distribution == "mixed":
        low, high = weighted_choice(
            (((lo, hi), weight) for weight, lo, hi in pattern.ranges), rng
        )
        delay = rng.randint(low, high)
    else:
        delay = rng.randint(pattern.min_ms, pattern.max_ms)

    return max(pattern.min_ms, min(pattern.max_ms, int(delay)))
