"""Headless-browser page loading with anti-blocking measures and retries."""

import asyncio
import logging
import random
from contextlib import asynccontextmanager
from typing import Any, AsyncContextManager, AsyncIterator, Awaitable, Callable, Protocol

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright
from playwright_stealth import Stealth

from .errors import FetchError, FetchErrorKind
from .fingerprints import UserAgentRotator, browser_type
from .models import AttemptOutcome, FetchResult, ParseAttempt
from .rate_limiter import DomainRateLimiter, domain_of

logger = logging.getLogger(__name__)

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
]

# 4xx statuses that a later attempt with another fingerprint may get past
RETRYABLE_CLIENT_STATUSES = {403, 408, 425, 429}

SleepFn = Callable[[float], Awaitable[None]]


@asynccontextmanager
async def launch_browser(headless: bool = True) -> AsyncIterator[Any]:
    """Launch a Chromium instance and close it on every exit path."""
    async with async_playwright() as pw:
        browser = await pw.chromium.launch(headless=headless, args=BROWSER_ARGS)
        logger.debug("Chromium browser launched")
        try:
            yield browser
        finally:
            await browser.close()
            logger.debug("Chromium browser closed")


def build_headers(user_agent: str) -> dict[str, str]:
    """Request headers a real browser with this user agent would send."""
    headers = {
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Upgrade-Insecure-Requests": "1",
        "DNT": "1",
    }
    if browser_type(user_agent) in ("chrome", "edge"):
        headers["Sec-Fetch-Dest"] = "document"
        headers["Sec-Fetch-Mode"] = "navigate"
        headers["Sec-Fetch-Site"] = "none"
        headers["Sec-Fetch-User"] = "?1"
    return headers


def classify_status(status: int | None) -> FetchErrorKind | None:
    """Map an HTTP status to a failure kind, or None when the page loaded."""
    if status is None or status < 400:
        return None
    if status < 500 and status not in RETRYABLE_CLIENT_STATUSES:
        return FetchErrorKind.FATAL
    return FetchErrorKind.RETRYABLE


class Fetcher(Protocol):
    async def fetch(self, url: str, attempt: ParseAttempt) -> FetchResult: ...


class PageFetcher:
    """
    Loads a page in a headless browser and returns its rendered HTML.

    Each call holds a rate-limiter permit for the page's domain and one
    browser instance; both are released however the call ends.
    """

    def __init__(
        self,
        rate_limiter: DomainRateLimiter,
        *,
        browser_factory: Callable[[], AsyncContextManager[Any]] | None = None,
        stealth: Any = None,
        timeout: float = 45.0,
        headless: bool = True,
        scroll_pause: tuple[float, float] = (1.0, 3.0),
        rng: random.Random | None = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self._rate_limiter = rate_limiter
        self._browser_factory = browser_factory or (lambda: launch_browser(headless=headless))
        self._stealth = stealth or Stealth()
        self._timeout = timeout
        self._scroll_pause = scroll_pause
        self._rng = rng or random.Random()
        self._sleep = sleep

    async def fetch(self, url: str, attempt: ParseAttempt) -> FetchResult:
        """
        Load ``url`` with the attempt's fingerprint.

        Raises:
            FetchError: RETRYABLE on timeouts, connection failures, blocks and
                5xx responses; FATAL on permanent 4xx responses
        """
        async with self._rate_limiter.acquire(domain_of(url)):
            try:
                return await asyncio.wait_for(self._load(url, attempt), timeout=self._timeout)
            except (asyncio.TimeoutError, PlaywrightTimeoutError) as e:
                raise FetchError(
                    FetchErrorKind.RETRYABLE,
                    f"Timed out loading page after {self._timeout:.0f}s",
                    url=url,
                ) from e
            except PlaywrightError as e:
                raise FetchError(
                    FetchErrorKind.RETRYABLE,
                    f"Browser failed to load page: {e.message}",
                    url=url,
                ) from e

    async def _load(self, url: str, attempt: ParseAttempt) -> FetchResult:
        async with self._browser_factory() as browser:
            context = await browser.new_context(
                user_agent=attempt.user_agent,
                viewport={"width": attempt.viewport.width, "height": attempt.viewport.height},
                locale="en-US",
                extra_http_headers=build_headers(attempt.user_agent),
            )
            try:
                page = await context.new_page()
                await self._stealth.apply_stealth_async(page)

                logger.info(f"Navigating to URL: {url} (attempt {attempt.attempt_number})")
                response = await page.goto(
                    url,
                    wait_until="domcontentloaded",
                    timeout=self._timeout * 1000,
                )
                status = response.status if response is not None else None
                kind = classify_status(status)
                if kind is not None:
                    raise FetchError(kind, f"HTTP {status} loading page", url=url, status_code=status)

                await self._simulate_reading(page)

                html = await page.content()
                return FetchResult(html=html, final_url=page.url, status_code=status)
            finally:
                await context.close()

    async def _simulate_reading(self, page: Any) -> None:
        """Scroll once or twice with human-length pauses."""
        low, high = self._scroll_pause
        for _ in range(self._rng.randint(1, 2)):
            await page.mouse.wheel(0, self._rng.randint(300, 1200))
            await self._sleep(self._rng.uniform(low, high))


def backoff_delay(
    retry_index: int,
    base_delay: float,
    max_jitter: float,
    rng: random.Random,
) -> float:
    """Delay before retry number ``retry_index`` (0-based): base * 2^n + jitter."""
    return base_delay * (2 ** retry_index) + rng.uniform(0, max_jitter)


async def fetch_with_retry(
    fetcher: Fetcher,
    url: str,
    *,
    rotator: UserAgentRotator,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_jitter: float = 0.5,
    sleep: SleepFn = asyncio.sleep,
    rng: random.Random | None = None,
) -> FetchResult:
    """
    Fetch ``url``, retrying retryable failures with exponential backoff.

    Every attempt uses a user agent not used by an earlier attempt.
    Fatal failures are raised at once; retryable ones are raised after the
    last attempt.
    """
    if max_attempts > rotator.pool_size:
        raise ValueError(
            f"max_attempts={max_attempts} exceeds the {rotator.pool_size} available user agents"
        )

    rng = rng or random.Random()
    used_user_agents: set[str] = set()

    for index in range(max_attempts):
        delay = backoff_delay(index - 1, base_delay, max_jitter, rng) if index else 0.0
        if delay:
            logger.info(f"Retrying {url} in {delay:.2f}s")
            await sleep(delay)

        fingerprint = rotator.next_fingerprint(exclude=used_user_agents)
        used_user_agents.add(fingerprint.user_agent)
        attempt = ParseAttempt(
            attempt_number=index + 1,
            fingerprint=fingerprint,
            delay_before_ms=int(delay * 1000),
        )

        try:
            result = await fetcher.fetch(url, attempt)
        except FetchError as e:
            attempt.error_kind = e.kind.value
            if not e.retryable:
                attempt.outcome = AttemptOutcome.FATAL_FAILURE
                logger.warning(f"Fatal fetch failure for {url}: {e.message}")
                raise
            attempt.outcome = AttemptOutcome.RETRYABLE_FAILURE
            logger.warning(
                f"Attempt {attempt.attempt_number}/{max_attempts} failed for {url}: {e.message}"
            )
            if attempt.attempt_number == max_attempts:
                raise
            continue

        attempt.outcome = AttemptOutcome.SUCCESS
        logger.info(f"Fetched {url} on attempt {attempt.attempt_number}")
        return result

    raise AssertionError("unreachable")
