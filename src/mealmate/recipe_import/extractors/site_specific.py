"""Hand-tuned CSS selectors for major recipe sites."""

import logging
from dataclasses import dataclass

from ..models import ExtractionMethod, RawExtraction, RecipeDraft
from ..rate_limiter import domain_of, host_matches
from .base import ExtractionTier, parse_html, select_first_text, select_texts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SiteSelectors:
    """CSS selectors for one site's recipe layout."""

    title: str
    ingredients: str
    instructions: str
    prep_time: str | None = None
    cook_time: str | None = None
    servings: str | None = None
    images: str | None = None


@dataclass(frozen=True)
class SiteConfig:
    """A recipe site the engine has dedicated selectors for."""

    name: str
    domains: tuple[str, ...]
    selectors: SiteSelectors
    features: tuple[str, ...] = ()
    quality: str = "good"

    def matches(self, host: str) -> bool:
        return any(host_matches(host, domain) for domain in self.domains)


SITE_CONFIGS: list[SiteConfig] = [
    SiteConfig(
        name="AllRecipes",
        domains=("allrecipes.com",),
        features=("structured-data", "images", "nutrition"),
        quality="excellent",
        selectors=SiteSelectors(
            title="h1.headline, h1.article-heading",
            ingredients=".recipe-summary__item, .mntl-structured-ingredients__list-item",
            instructions=".instructions-section .paragraph, .mntl-sc-block-group--OL li p",
            prep_time='.recipe-summary__item[data-id="prep-time"]',
            cook_time='.recipe-summary__item[data-id="cook-time"]',
            servings='.recipe-summary__item[data-id="servings"]',
            images=".recipe-summary__image img, .recipe-media img",
        ),
    ),
    SiteConfig(
        name="Food Network",
        domains=("foodnetwork.com",),
        features=("structured-data", "images", "chef-info"),
        quality="excellent",
        selectors=SiteSelectors(
            title="h1.o-AssetTitle__a-HeadlineText",
            ingredients=".o-RecipeIngredient__a-Ingredient",
            instructions=".o-Method__m-Step",
            prep_time='.o-RecipeInfo__a-Description[data-module="prep time"]',
            cook_time='.o-RecipeInfo__a-Description[data-module="cook time"]',
            images=".m-MediaBlock__a-Image img, .recipe-lead-image img",
        ),
    ),
    SiteConfig(
        name="Bon Appétit",
        domains=("bonappetit.com",),
        features=("structured-data", "images", "editorial"),
        quality="excellent",
        selectors=SiteSelectors(
            title='h1[data-testid="ContentHeaderHed"]',
            ingredients='[data-testid="IngredientList"] li',
            instructions='[data-testid="InstructionsWrapper"] li',
            prep_time='[data-testid="prep-time"]',
            cook_time='[data-testid="cook-time"]',
            images=".recipe-header-image img, .content-image img",
        ),
    ),
    SiteConfig(
        name="Serious Eats",
        domains=("seriouseats.com",),
        features=("structured-data", "images", "detailed-instructions"),
        quality="excellent",
        selectors=SiteSelectors(
            title="h1.heading__title",
            ingredients=".recipe-ingredient, .structured-ingredients__list-item",
            instructions=".recipe-procedure-text",
            prep_time='.recipe-about__item[data-ingredient="prep time"]',
            cook_time='.recipe-about__item[data-ingredient="cook time"]',
            images=".recipe-header__image img, .recipe-image img",
        ),
    ),
    SiteConfig(
        name="Tasty",
        domains=("tasty.co",),
        features=("structured-data", "video", "images"),
        quality="good",
        selectors=SiteSelectors(
            title="h1.recipe-name",
            ingredients=".recipe-ingredients li, .ingredients__section li",
            instructions=".recipe-instructions li, .preparation ol li",
            prep_time=".recipe-time-container .prep-time",
            cook_time=".recipe-time-container .cook-time",
            images=".recipe-video-container img, .recipe-image img",
        ),
    ),
]


# Sites without dedicated selectors whose structured data parses reliably
STRUCTURED_DATA_DOMAINS = [
    "food.com",
    "epicurious.com",
    "delish.com",
    "eatingwell.com",
    "cookinglight.com",
]


class SiteRegistry:
    """Lookup of SiteConfig by page hostname."""

    def __init__(self, configs: list[SiteConfig] | None = None):
        self.configs = list(SITE_CONFIGS if configs is None else configs)

    def lookup(self, url_or_host: str) -> SiteConfig | None:
        host = domain_of(url_or_host)
        if not host:
            return None
        for config in self.configs:
            if config.matches(host):
                return config
        return None

    @property
    def domains(self) -> list[str]:
        return [domain for config in self.configs for domain in config.domains]

    @property
    def supported_domains(self) -> list[str]:
        """Registered domains plus sites known to publish good structured data."""
        return self.domains + [d for d in STRUCTURED_DATA_DOMAINS if d not in self.domains]

    def is_supported(self, url_or_host: str) -> bool:
        host = domain_of(url_or_host)
        return any(host_matches(host, domain) for domain in self.supported_domains)


class SiteSpecificTier(ExtractionTier):
    """Applies a registered site's selectors; skips unregistered hosts."""

    method = ExtractionMethod.SITE_SPECIFIC

    def __init__(self, registry: SiteRegistry | None = None):
        self.registry = registry or SiteRegistry()

    def try_extract(self, html: str, page_url: str) -> RecipeDraft | None:
        config = self.registry.lookup(page_url)
        if config is None:
            return None

        logger.debug(f"Using {config.name} selectors for {page_url}")
        soup = parse_html(html)
        selectors = config.selectors

        raw = RawExtraction(
            name=select_first_text(soup, selectors.title),
            ingredients=select_texts(soup, selectors.ingredients),
            instructions=select_texts(soup, selectors.instructions),
            prep_time=select_first_text(soup, selectors.prep_time) if selectors.prep_time else None,
            cook_time=select_first_text(soup, selectors.cook_time) if selectors.cook_time else None,
            servings=select_first_text(soup, selectors.servings) if selectors.servings else None,
        )
        return self._finish(raw, page_url)
