"""
Recipe extraction from free-form text via an LLM.

Used for social media captions and other pasted text where there is no
page to scrape. The provider call is made exactly once; retrying a paid
API call is left to the caller.
"""

import json
import logging
from typing import Awaitable, Callable, Literal

from mealmate.llm.client import complete_json

from .errors import TextExtractionError, TextExtractionErrorKind
from .models import ExtractionMethod, RawExtraction, RecipeDraft
from .normalizer import normalize
from .prompts import SYSTEM_PROMPT, build_user_prompt

logger = logging.getLogger(__name__)

TextContext = Literal["social_media", "general"]

# (system_prompt, user_prompt, purpose) -> raw response text
TextProvider = Callable[[str, str, str], Awaitable[str]]

DEFAULT_MAX_TEXT_LENGTH = 10_000

# Text length at which the length component of confidence maxes out
CONFIDENCE_FULL_LENGTH = 300


async def openai_provider(system_prompt: str, user_prompt: str, purpose: str) -> str:
    return await complete_json(system_prompt=system_prompt, user_prompt=user_prompt, purpose=purpose)


def strip_code_fences(content: str) -> str:
    """Remove a surrounding ```json ... ``` block if the model added one."""
    content = content.strip()
    if not content.startswith("```"):
        return content
    lines = content.split("\n")
    if lines[0].startswith("```"):
        lines = lines[1:]
    if lines and lines[-1].strip() == "```":
        lines = lines[:-1]
    return "\n".join(lines).strip()


def score_confidence(draft: RecipeDraft, text: str) -> float:
    """
    Advisory 0-1 score for how complete a text extraction looks.

    Components:
        ingredients    0.30 for two or more, 0.15 for one
        steps          0.25 for two or more, 0.10 for one
        quantities     0.25 x share of ingredients with an amount
        input length   0.20 x min(1, len(text) / 300)
    """
    ingredient_count = len(draft.ingredients)
    step_count = len([line for line in draft.instructions.splitlines() if line.strip()])

    score = 0.0
    if ingredient_count >= 2:
        score += 0.30
    elif ingredient_count == 1:
        score += 0.15

    if step_count >= 2:
        score += 0.25
    elif step_count == 1:
        score += 0.10

    if ingredient_count:
        with_amount = sum(1 for ingredient in draft.ingredients if ingredient.amount)
        score += 0.25 * with_amount / ingredient_count

    score += 0.20 * min(1.0, len(text.strip()) / CONFIDENCE_FULL_LENGTH)

    return round(max(0.0, min(1.0, score)), 2)


class TextRecipeExtractor:
    """Turns pasted recipe text into a RecipeDraft using an LLM provider."""

    def __init__(
        self,
        provider: TextProvider | None = None,
        *,
        max_text_length: int = DEFAULT_MAX_TEXT_LENGTH,
    ):
        self._provider = provider or openai_provider
        self.max_text_length = max_text_length

    def validate(self, text: str | None) -> str:
        """Return the trimmed text or raise for empty/oversized input."""
        stripped = (text or "").strip()
        if not stripped:
            raise TextExtractionError(
                TextExtractionErrorKind.EMPTY_INPUT,
                "Recipe text is required",
                limit=self.max_text_length,
                length=0,
            )
        if len(stripped) > self.max_text_length:
            raise TextExtractionError(
                TextExtractionErrorKind.TOO_LONG,
                f"Recipe text is too long (max {self.max_text_length:,} characters)",
                limit=self.max_text_length,
                length=len(stripped),
            )
        return stripped

    async def extract(
        self,
        text: str,
        context: TextContext = "general",
        source_url: str | None = None,
    ) -> RecipeDraft:
        """
        Extract a recipe from ``text``.

        Raises:
            TextExtractionError: empty_input or too_long before any provider
                call; provider_error if the provider fails; unparseable if
                the response is not a recipe with a name and instructions
        """
        stripped = self.validate(text)
        purpose = f"text_extraction_{context}"
        logger.info(f"Parsing recipe from text ({len(stripped)} chars), context: {context}")

        try:
            content = await self._provider(SYSTEM_PROMPT, build_user_prompt(stripped, context), purpose)
        except Exception as e:
            logger.error(f"Text extraction provider failed: {e}")
            raise TextExtractionError(
                TextExtractionErrorKind.PROVIDER_ERROR,
                f"Recipe text service failed: {e}",
            ) from e

        data = self._parse_response(content)

        raw = RawExtraction(
            name=data.get("name"),
            ingredients=data.get("ingredients"),
            instructions=data.get("instructions"),
            source_url=source_url,
            description=data.get("description"),
            prep_time=data.get("prep_time"),
            cook_time=data.get("cook_time"),
            total_time=data.get("total_time"),
            servings=data.get("servings"),
            cuisine=data.get("cuisine"),
            category=data.get("category"),
        )
        draft = normalize(raw, base_url=source_url, method=ExtractionMethod.TEXT_AI)
        if not draft.is_usable:
            raise TextExtractionError(
                TextExtractionErrorKind.UNPARSEABLE,
                "Could not find a recipe name and instructions in the text",
            )

        draft.confidence = score_confidence(draft, stripped)
        logger.info(
            f"Text extraction found '{draft.name}' with {len(draft.ingredients)} ingredients "
            f"(confidence {draft.confidence})"
        )
        return draft

    def _parse_response(self, content: str) -> dict:
        try:
            data = json.loads(strip_code_fences(content or ""))
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse LLM response: {e}")
            raise TextExtractionError(
                TextExtractionErrorKind.UNPARSEABLE,
                "Recipe text service returned invalid JSON",
            ) from e

        if not isinstance(data, dict):
            raise TextExtractionError(
                TextExtractionErrorKind.UNPARSEABLE,
                "Recipe text service returned an unexpected response shape",
            )
        return data
