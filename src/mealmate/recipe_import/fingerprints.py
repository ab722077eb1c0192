"""Rotating browser identities for page loads."""

import logging
import random
from collections import Counter
from typing import Collection

from .models import Fingerprint, Viewport

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENTS = [
    # Chrome on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/118.0.0.0 Safari/537.36",
    # Chrome on macOS
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    # Firefox on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:120.0) Gecko/20100101 Firefox/120.0",
    # Firefox on macOS
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:121.0) Gecko/20100101 Firefox/121.0",
    # Safari on macOS
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15",
    # Chrome on Linux
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36",
    # Edge on Windows
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.0.0",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/119.0.0.0 Safari/537.36 Edg/119.0.0.0",
]

DEFAULT_VIEWPORTS = [
    Viewport(1920, 1080),
    Viewport(1366, 768),
    Viewport(1440, 900),
    Viewport(1536, 864),
    Viewport(1280, 720),
    Viewport(1600, 900),
    Viewport(2560, 1440),
]


def browser_type(user_agent: str) -> str:
    """Get browser family from a user agent string."""
    if "Edg" in user_agent:
        return "edge"
    if "Firefox" in user_agent:
        return "firefox"
    if "Chrome" in user_agent:
        return "chrome"
    if "Safari" in user_agent:
        return "safari"
    return "unknown"


def os_type(user_agent: str) -> str:
    """Get operating system from a user agent string."""
    if "Windows" in user_agent:
        return "windows"
    if "Macintosh" in user_agent:
        return "macos"
    if "Linux" in user_agent:
        return "linux"
    return "unknown"


class UserAgentRotator:
    """
    Hands out realistic browser fingerprints.

    User agents are drawn uniformly from the pool, skipping any the caller
    excludes (e.g. ones already tried for the same URL) and, when possible,
    the one handed out last. Viewports are drawn uniformly at random.
    """

    def __init__(
        self,
        user_agents: list[str] | None = None,
        viewports: list[Viewport] | None = None,
        rng: random.Random | None = None,
    ):
        self.user_agents = list(user_agents or DEFAULT_USER_AGENTS)
        self.viewports = list(viewports or DEFAULT_VIEWPORTS)
        if not self.user_agents or not self.viewports:
            raise ValueError("UserAgentRotator needs at least one user agent and one viewport")
        self._rng = rng or random.Random()
        self._last_user_agent: str | None = None

    @property
    def pool_size(self) -> int:
        return len(self.user_agents)

    def next_fingerprint(self, exclude: Collection[str] = ()) -> Fingerprint:
        """
        Pick a fingerprint whose user agent is not in ``exclude``.

        Raises:
            ValueError: every user agent in the pool is excluded
        """
        candidates = [ua for ua in self.user_agents if ua not in exclude]
        if not candidates:
            raise ValueError(f"All {self.pool_size} user agents already used")

        if len(candidates) > 1 and self._last_user_agent in candidates:
            candidates.remove(self._last_user_agent)

        user_agent = self._rng.choice(candidates)
        viewport = self._rng.choice(self.viewports)
        self._last_user_agent = user_agent

        logger.debug(
            f"Selected fingerprint: {user_agent[:50]}... "
            f"({viewport.width}x{viewport.height})"
        )
        return Fingerprint(user_agent=user_agent, viewport=viewport)

    def stats(self) -> dict:
        """Pool size broken down by browser and operating system."""
        return {
            "total_user_agents": self.pool_size,
            "browsers": dict(Counter(browser_type(ua) for ua in self.user_agents)),
            "operating_systems": dict(Counter(os_type(ua) for ua in self.user_agents)),
        }
