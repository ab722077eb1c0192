"""JSON-LD/Schema.org extraction."""

import json
import logging
from typing import Any, Iterator

from ..models import ExtractionMethod, RawExtraction, RecipeDraft
from .base import ExtractionTier, parse_html

logger = logging.getLogger(__name__)


def is_recipe_type(item_type: Any) -> bool:
    """
    Check an ``@type`` value for Recipe.

    Accepts "Recipe", "recipe", "schema:Recipe", "http://schema.org/Recipe"
    and lists containing any of those.
    """
    if isinstance(item_type, list):
        return any(is_recipe_type(t) for t in item_type)
    if not isinstance(item_type, str):
        return False
    return item_type.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1].lower() == "recipe"


def find_recipes(data: Any) -> Iterator[dict]:
    """Yield every Recipe object in a JSON-LD document, in document order."""
    if isinstance(data, list):
        for item in data:
            yield from find_recipes(item)
        return

    if not isinstance(data, dict):
        return

    if is_recipe_type(data.get("@type")):
        yield data

    # Recipe inside @graph or attached to a WebPage
    for key in ("@graph", "mainEntity", "mainEntityOfPage"):
        nested = data.get(key)
        if isinstance(nested, (list, dict)):
            yield from find_recipes(nested)


def _load_blocks(html: str) -> Iterator[Any]:
    """Parsed JSON of each ld+json script; malformed blocks are skipped."""
    soup = parse_html(html)
    for index, script in enumerate(soup.find_all("script", type="application/ld+json")):
        text = script.string or script.get_text()
        if not text or not text.strip():
            continue
        try:
            yield json.loads(text, strict=False)
        except json.JSONDecodeError as e:
            logger.debug(f"Skipping malformed JSON-LD block #{index}: {e}")


def raw_from_schema(recipe_data: dict) -> RawExtraction:
    """Map Schema.org Recipe fields onto a RawExtraction."""
    return RawExtraction(
        name=recipe_data.get("name") or recipe_data.get("headline"),
        ingredients=recipe_data.get("recipeIngredient") or recipe_data.get("ingredients"),
        instructions=recipe_data.get("recipeInstructions"),
        description=recipe_data.get("description"),
        prep_time=recipe_data.get("prepTime"),
        cook_time=recipe_data.get("cookTime"),
        total_time=recipe_data.get("totalTime"),
        servings=recipe_data.get("recipeYield"),
        cuisine=recipe_data.get("recipeCuisine"),
        category=recipe_data.get("recipeCategory"),
        author=recipe_data.get("author"),
        nutrition=recipe_data.get("nutrition"),
    )


class JsonLdTier(ExtractionTier):
    """Reads Schema.org Recipe objects from ``<script type="application/ld+json">``."""

    method = ExtractionMethod.JSON_LD

    def try_extract(self, html: str, page_url: str) -> RecipeDraft | None:
        for block in _load_blocks(html):
            for recipe_data in find_recipes(block):
                draft = self._finish(raw_from_schema(recipe_data), page_url)
                if draft is not None:
                    return draft
        return None
