"""Per-domain request throttling for page fetches.

One DomainRateLimiter is built per process and handed to the fetcher, so
its counters are shared by every extraction running in that process.
"""

import asyncio
import logging
import time
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass
from enum import Enum
from typing import AsyncIterator, Protocol
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


class TrafficTier(str, Enum):
    """How aggressively a site rate-limits scrapers."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class RateLimitConfig:
    """Admission rules for one domain."""

    min_delay: float  # seconds between admitted requests
    max_concurrent: int
    burst_limit: int  # requests allowed per burst window
    burst_window: float = 60.0  # seconds


DEFAULT_TIER_CONFIGS: dict[TrafficTier, RateLimitConfig] = {
    TrafficTier.HIGH: RateLimitConfig(min_delay=3.0, max_concurrent=1, burst_limit=3),
    TrafficTier.MEDIUM: RateLimitConfig(min_delay=2.0, max_concurrent=2, burst_limit=5),
    TrafficTier.LOW: RateLimitConfig(min_delay=1.5, max_concurrent=2, burst_limit=7),
}

HIGH_TRAFFIC_SITES = ["allrecipes.com", "foodnetwork.com", "food.com", "epicurious.com"]
MEDIUM_TRAFFIC_SITES = ["bonappetit.com", "seriouseats.com", "tasty.co", "delish.com"]


class Clock(Protocol):
    """Time source used by the limiter; swapped for a fake in tests."""

    def now(self) -> float: ...

    async def sleep(self, seconds: float) -> None: ...


class MonotonicClock:
    """Wall-clock implementation of Clock."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


def domain_of(url_or_host: str) -> str:
    """Lowercased hostname without a leading 'www.'."""
    host = urlparse(url_or_host).hostname if "//" in url_or_host else url_or_host
    host = (host or "").lower().strip(".")
    return host[4:] if host.startswith("www.") else host


def host_matches(host: str, site: str) -> bool:
    """True when ``host`` is ``site`` or one of its subdomains."""
    host = domain_of(host)
    return host == site or host.endswith("." + site)


class _DomainBucket:
    """Counters for one domain. Only mutated while holding ``admission``."""

    def __init__(self, config: RateLimitConfig):
        self.config = config
        self.admission = asyncio.Lock()
        self.slots = asyncio.Semaphore(config.max_concurrent)
        self.last_request: float | None = None
        self.history: deque[float] = deque()
        self.active = 0
        self.waiting = 0

    def prune(self, now: float) -> None:
        cutoff = now - self.config.burst_window
        while self.history and self.history[0] <= cutoff:
            self.history.popleft()

    def wait_time(self, now: float) -> float:
        """Seconds until both the delay and burst rules allow a request."""
        self.prune(now)
        wait = 0.0
        if self.last_request is not None:
            wait = max(wait, self.config.min_delay - (now - self.last_request))
        if len(self.history) >= self.config.burst_limit:
            wait = max(wait, self.config.burst_window - (now - self.history[0]))
        return wait

    def record(self, now: float) -> None:
        self.last_request = now
        self.history.append(now)
        self.active += 1


class DomainRateLimiter:
    """
    Throttles requests per domain.

    Before a request to a domain is admitted, three rules must hold:
    - at least ``min_delay`` seconds since the last admitted request
    - fewer than ``max_concurrent`` requests in flight
    - fewer than ``burst_limit`` requests inside the sliding ``burst_window``

    ``acquire`` waits until all three hold; it never fails because a domain
    is busy. Waiters for the same domain are admitted in arrival order.
    """

    def __init__(
        self,
        tier_configs: dict[TrafficTier, RateLimitConfig] | None = None,
        clock: Clock | None = None,
        high_traffic_sites: list[str] | None = None,
        medium_traffic_sites: list[str] | None = None,
    ):
        self.tier_configs = {**DEFAULT_TIER_CONFIGS, **(tier_configs or {})}
        self.high_traffic_sites = high_traffic_sites or HIGH_TRAFFIC_SITES
        self.medium_traffic_sites = medium_traffic_sites or MEDIUM_TRAFFIC_SITES
        self._clock = clock or MonotonicClock()
        self._buckets: dict[str, _DomainBucket] = {}

    def classify(self, domain: str) -> TrafficTier:
        """Get the traffic tier for a domain."""
        if any(host_matches(domain, site) for site in self.high_traffic_sites):
            return TrafficTier.HIGH
        if any(host_matches(domain, site) for site in self.medium_traffic_sites):
            return TrafficTier.MEDIUM
        return TrafficTier.LOW

    def config_for(self, domain: str) -> RateLimitConfig:
        return self.tier_configs[self.classify(domain)]

    def _bucket(self, domain: str) -> _DomainBucket:
        domain = domain_of(domain)
        bucket = self._buckets.get(domain)
        if bucket is None:
            config = self.config_for(domain)
            bucket = _DomainBucket(config)
            self._buckets[domain] = bucket
            logger.info(f"Created rate limiter for domain: {domain} {asdict(config)}")
        return bucket

    async def _admit(self, domain: str, bucket: _DomainBucket) -> None:
        bucket.waiting += 1
        try:
            async with bucket.admission:
                await bucket.slots.acquire()
                try:
                    while (wait := bucket.wait_time(self._clock.now())) > 0:
                        logger.debug(f"Rate limit for {domain}: waiting {wait:.2f}s")
                        await self._clock.sleep(wait)
                except BaseException:
                    bucket.slots.release()
                    raise
                bucket.record(self._clock.now())
        finally:
            bucket.waiting -= 1

    @asynccontextmanager
    async def acquire(self, domain: str, timeout: float | None = None) -> AsyncIterator[None]:
        """
        Hold a request permit for ``domain`` for the duration of the block.

        Args:
            domain: Hostname or URL of the site being requested
            timeout: Give up waiting after this many seconds

        Raises:
            asyncio.TimeoutError: ``timeout`` elapsed before a permit was granted
        """
        domain = domain_of(domain)
        bucket = self._bucket(domain)

        if timeout is None:
            await self._admit(domain, bucket)
        else:
            await asyncio.wait_for(self._admit(domain, bucket), timeout)

        logger.debug(
            f"Request allowed for {domain}: active={bucket.active}, "
            f"waiting={bucket.waiting}, recent={len(bucket.history)}"
        )
        try:
            yield
        finally:
            bucket.active -= 1
            bucket.slots.release()

    def stats(self, domain: str) -> dict:
        """Current counters for one domain."""
        bucket = self._bucket(domain)
        bucket.prune(self._clock.now())
        return {
            "tier": self.classify(domain).value,
            "active_requests": bucket.active,
            "waiting_requests": bucket.waiting,
            "recent_requests": len(bucket.history),
            "config": asdict(bucket.config),
        }

    def all_stats(self) -> dict[str, dict]:
        """Counters for every domain seen so far."""
        return {domain: self.stats(domain) for domain in list(self._buckets)}
