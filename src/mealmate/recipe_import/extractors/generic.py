"""Last-resort selector heuristics for pages without structured data."""

import logging

from ..models import ExtractionMethod, RawExtraction, RecipeDraft
from .base import ExtractionTier, parse_html, select_first_text, select_texts

logger = logging.getLogger(__name__)

TITLE_SELECTORS = [
    '[class*="recipe-title"]',
    '[class*="recipe-name"]',
    "h1",
    ".entry-title",
    ".post-title",
]

INGREDIENT_SELECTORS = [
    ".recipe-ingredient",
    ".ingredient",
    ".ingredients li",
    '[class*="ingredient"] li',
    '[id*="ingredient"] li',
    '[class*="ingredient"]',
]

INSTRUCTION_SELECTORS = [
    ".recipe-instruction",
    ".instruction",
    ".instructions li",
    '[class*="instruction"] li',
    '[id*="instruction"] li',
    '[class*="direction"] li',
    '[id*="direction"] li',
    '[class*="recipe"] ol li',
    '[class*="instruction"] p',
]

MIN_TITLE_LENGTH = 4
MIN_INGREDIENTS = 2


def _first_title(soup) -> str | None:
    for selector in TITLE_SELECTORS:
        title = select_first_text(soup, selector)
        if title and len(title) >= MIN_TITLE_LENGTH:
            return title
    return None


def _first_list(soup, selectors: list[str], minimum: int) -> list[str]:
    for selector in selectors:
        texts = [t for t in select_texts(soup, selector) if len(t) > 2]
        if len(texts) >= minimum:
            return texts
    return []


class GenericTier(ExtractionTier):
    """Matches class/id names containing recipe, ingredient, instruction or direction."""

    method = ExtractionMethod.GENERIC

    def try_extract(self, html: str, page_url: str) -> RecipeDraft | None:
        soup = parse_html(html)

        name = _first_title(soup)
        if not name:
            return None

        ingredients = _first_list(soup, INGREDIENT_SELECTORS, MIN_INGREDIENTS)
        if not ingredients:
            logger.debug(f"Generic tier found a title but no ingredient list on {page_url}")
            return None

        raw = RawExtraction(
            name=name,
            ingredients=ingredients,
            instructions=_first_list(soup, INSTRUCTION_SELECTORS, 1),
        )
        return self._finish(raw, page_url)
