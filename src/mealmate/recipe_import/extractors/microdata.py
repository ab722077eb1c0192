"""Schema.org microdata extraction (itemscope/itemprop markup)."""

import logging
from typing import Any, Iterator

import extruct

from ..models import ExtractionMethod, RecipeDraft
from .base import ExtractionTier
from .json_ld import is_recipe_type, raw_from_schema

logger = logging.getLogger(__name__)


def find_recipes_in_microdata(items: list) -> Iterator[dict]:
    """Yield the properties of every Recipe item, including nested ones."""
    for item in items:
        if not isinstance(item, dict):
            continue
        if is_recipe_type(item.get("type")):
            yield item.get("properties", {})
        for value in item.get("properties", {}).values():
            nested = value if isinstance(value, list) else [value]
            yield from find_recipes_in_microdata([v for v in nested if isinstance(v, dict)])


def _text_values(properties: dict) -> dict[str, Any]:
    """
    Unwrap nested itemscope values that only carry text.

    extruct turns ``<li itemprop="recipeInstructions" itemscope
    itemtype="HowToStep">`` into ``{"type": ..., "properties": {...}}``; the
    normalizer understands that shape, but a nested author item is reduced
    to its name here.
    """
    author = properties.get("author")
    if isinstance(author, dict) and "properties" in author:
        properties = {**properties, "author": author["properties"].get("name")}
    return properties


class MicrodataTier(ExtractionTier):
    """Reads elements whose ``itemtype`` references schema.org/Recipe."""

    method = ExtractionMethod.MICRODATA

    def try_extract(self, html: str, page_url: str) -> RecipeDraft | None:
        data = extruct.extract(
            html,
            base_url=page_url,
            syntaxes=["microdata"],
            errors="log",
        )
        for properties in find_recipes_in_microdata(data.get("microdata", [])):
            draft = self._finish(raw_from_schema(_text_values(properties)), page_url)
            if draft is not None:
                return draft
        return None
