"""
MealMate - LLM Client.

Thin wrapper around the OpenAI SDK for JSON-mode chat completions.
The text extractor is the only caller; it owns retries (none) and error
classification, so the SDK's own retries are switched off here.
"""

import logging

from openai import AsyncOpenAI

from mealmate.config import settings
from mealmate.llm.prompt_logger import log_prompt

logger = logging.getLogger(__name__)

# Singleton client instance
_client: AsyncOpenAI | None = None


class LLMConfigurationError(RuntimeError):
    """Raised when the text path is used without an OpenAI API key."""


def get_client() -> AsyncOpenAI:
    """
    Get the shared AsyncOpenAI client.

    Uses singleton pattern to reuse the connection pool.
    """
    global _client

    if _client is None:
        if not settings.openai_api_key:
            raise LLMConfigurationError("OPENAI_API_KEY is not set")
        _client = AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.llm_timeout_seconds,
            max_retries=0,
        )

    return _client


def reset_client() -> None:
    """Drop the cached client (for tests and settings reloads)."""
    global _client
    _client = None


async def complete_json(
    *,
    system_prompt: str,
    user_prompt: str,
    purpose: str = "text_extraction",
) -> str:
    """
    Run one chat completion in JSON mode and return the raw message text.

    Raises whatever the SDK raises (timeouts, auth, rate limits); callers
    decide how to surface it.
    """
    client = get_client()
    model = settings.openai_model

    try:
        response = await client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            response_format={"type": "json_object"},
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
        )
    except Exception as e:
        log_prompt(
            purpose=purpose,
            model=model,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            error=str(e),
        )
        raise

    content = response.choices[0].message.content or ""
    if response.usage is not None:
        logger.debug(
            f"{purpose}: {response.usage.prompt_tokens} prompt tokens, "
            f"{response.usage.completion_tokens} completion tokens"
        )

    log_prompt(
        purpose=purpose,
        model=model,
        system_prompt=system_prompt,
        user_prompt=user_prompt,
        response=content,
    )
    return content
