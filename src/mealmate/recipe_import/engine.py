"""Main recipe extraction orchestration."""

import asyncio
import logging
import random
from typing import Sequence
from urllib.parse import urlparse

from mealmate.config import EngineSettings, get_settings

from .errors import ExtractionError, ExtractionErrorKind
from .extractors import ExtractionTier, SiteRegistry, default_tiers, run_tiers
from .fetcher import Fetcher, PageFetcher, SleepFn, fetch_with_retry
from .fingerprints import UserAgentRotator
from .images import ImageScorer, discover_images
from .models import RecipeDraft
from .normalizer import attach_images
from .rate_limiter import DomainRateLimiter, domain_of
from .text_extractor import TextContext, TextProvider, TextRecipeExtractor

logger = logging.getLogger(__name__)

TEXT_MODE_SUGGESTION = (
    "Copy the recipe text from the website and use text import instead. "
    "MealMate can turn pasted text into a recipe."
)


def validate_url(url: str | None) -> str:
    """
    Check that ``url`` is an absolute http(s) URL and return it trimmed.

    Raises:
        ExtractionError: invalid_url
    """
    if not url or not url.strip():
        raise ExtractionError(ExtractionErrorKind.INVALID_URL, "URL is required", url=url)

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme.lower() not in ("http", "https"):
        raise ExtractionError(
            ExtractionErrorKind.INVALID_URL,
            "URL must start with http:// or https://",
            url=url,
        )
    if not parsed.hostname:
        raise ExtractionError(ExtractionErrorKind.INVALID_URL, "Invalid URL format", url=url)

    return url


class RecipeEngine:
    """
    Entry point for both extraction paths.

    URL path: validate, fetch with retries, run the tiers in order, then
    discover and score images. Text path: hand the text to the LLM-backed
    extractor. The rate limiter behind the fetcher is shared by every call
    made through one engine.
    """

    def __init__(
        self,
        *,
        fetcher: Fetcher,
        rotator: UserAgentRotator | None = None,
        text_extractor: TextRecipeExtractor | None = None,
        tiers: Sequence[ExtractionTier] | None = None,
        site_registry: SiteRegistry | None = None,
        image_scorer: ImageScorer | None = None,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_jitter: float = 0.5,
        default_max_images: int = 10,
        sleep: SleepFn = asyncio.sleep,
        rng: random.Random | None = None,
    ):
        self.fetcher = fetcher
        self.rotator = rotator or UserAgentRotator()
        self.text_extractor = text_extractor or TextRecipeExtractor()
        self.site_registry = site_registry or SiteRegistry()
        self.tiers = list(tiers) if tiers is not None else default_tiers(self.site_registry)
        self.image_scorer = image_scorer or ImageScorer()
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_jitter = max_jitter
        self.default_max_images = default_max_images
        self._sleep = sleep
        self._rng = rng

        if max_attempts > self.rotator.pool_size:
            raise ValueError(
                f"max_attempts={max_attempts} exceeds the {self.rotator.pool_size} available user agents"
            )

    @classmethod
    def from_settings(
        cls,
        config: EngineSettings | None = None,
        *,
        rate_limiter: DomainRateLimiter | None = None,
        provider: TextProvider | None = None,
    ) -> "RecipeEngine":
        """Build an engine with a real browser fetcher from settings."""
        config = config or get_settings()
        fetcher = PageFetcher(
            rate_limiter or DomainRateLimiter(),
            timeout=config.browser_timeout_seconds,
            headless=config.browser_headless,
            scroll_pause=(config.scroll_pause_min_seconds, config.scroll_pause_max_seconds),
        )
        return cls(
            fetcher=fetcher,
            text_extractor=TextRecipeExtractor(provider, max_text_length=config.max_text_length),
            image_scorer=ImageScorer(config.image_score_min, config.image_score_max),
            max_attempts=config.fetch_max_attempts,
            base_delay=config.fetch_base_delay_seconds,
            max_jitter=config.fetch_max_jitter_seconds,
            default_max_images=config.default_max_images,
        )

    async def parse_from_url(
        self,
        url: str,
        include_images: bool = True,
        max_images: int | None = None,
    ) -> RecipeDraft:
        """
        Extract a recipe from a web page.

        Raises:
            ExtractionError: invalid_url, or unrecognized_format when no
                tier finds a recipe (never retried)
            FetchError: fatal at once, retryable after the last attempt
        """
        url = validate_url(url)
        logger.info(f"Parsing recipe from URL: {url}")

        page = await fetch_with_retry(
            self.fetcher,
            url,
            rotator=self.rotator,
            max_attempts=self.max_attempts,
            base_delay=self.base_delay,
            max_jitter=self.max_jitter,
            sleep=self._sleep,
            rng=self._rng,
        )
        page_url = page.final_url or url

        draft = run_tiers(self.tiers, page.html, page_url)
        if draft is None:
            logger.info(f"All extraction methods failed for {page_url}")
            raise ExtractionError(
                ExtractionErrorKind.UNRECOGNIZED_FORMAT,
                "Could not find a recipe on this page",
                url=page_url,
            )

        if include_images:
            limit = self.default_max_images if max_images is None else max_images
            images = discover_images(
                page.html,
                page_url,
                hero_selectors=self._hero_selectors(page_url),
                scorer=self.image_scorer,
            )
            draft = attach_images(draft, images[: max(limit, 0)], page_url)

        logger.info(
            f"Parsed '{draft.name}' from {page_url} via {draft.method.value} "
            f"({len(draft.ingredients)} ingredients, {len(draft.candidate_images)} images)"
        )
        return draft

    async def parse_from_text(
        self,
        text: str,
        context: TextContext = "general",
        source_url: str | None = None,
    ) -> RecipeDraft:
        """Extract a recipe from pasted text. See TextRecipeExtractor.extract."""
        return await self.text_extractor.extract(text, context=context, source_url=source_url)

    def check_url(self, url: str | None) -> dict:
        """Validity and support status of a URL, without fetching it."""
        try:
            url = validate_url(url)
        except ExtractionError as e:
            return {"valid": False, "supported": False, "domain": None, "message": e.message}

        domain = domain_of(url)
        supported = self.site_registry.is_supported(domain)
        return {
            "valid": True,
            "supported": supported,
            "domain": domain,
            "message": (
                "URL is supported for recipe parsing"
                if supported
                else "URL is valid but may have limited parsing support"
            ),
        }

    def _hero_selectors(self, page_url: str) -> list[str]:
        config = self.site_registry.lookup(page_url)
        if config is None or not config.selectors.images:
            return []
        return [config.selectors.images]
