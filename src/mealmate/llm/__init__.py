"""LLM access for the text extraction path."""

from mealmate.llm.client import LLMConfigurationError, complete_json, get_client, reset_client
from mealmate.llm.prompt_logger import enable_prompt_logging, log_prompt

__all__ = [
    "LLMConfigurationError",
    "complete_json",
    "enable_prompt_logging",
    "get_client",
    "log_prompt",
    "reset_client",
]
