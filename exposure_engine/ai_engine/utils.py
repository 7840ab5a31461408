"""
exposure_engine/ai_engine/utils.py — Shared AI helper utilities.

Provides:
  - build_openrouter_llm()  : factory for the LangChain-compatible OpenRouter LLM
  - parse_json_safely()     : robust JSON extraction from messy LLM text
  - truncate_for_context()  : safely trim long strings to fit LLM context window
"""

import json
import logging
import re
from typing import Any

from langchain_openai import ChatOpenAI

from exposure_engine.config import settings

logger = logging.getLogger(__name__)

# OpenRouter's base URL (drop-in OpenAI-compatible API)
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


def build_openrouter_llm(temperature: float = 0.2) -> ChatOpenAI:
    """
    Build a LangChain ChatOpenAI client pointed at OpenRouter.

    Args:
        temperature: 0.0 = deterministic. Scoring runs low (0.2) so the
                     model sticks to the rubric tables.

    Returns:
        A LangChain-compatible LLM instance.

    Raises:
        RuntimeError: If no OpenRouter API key is configured.
    """
    if not settings.openrouter_api_key:
        raise RuntimeError("OPENROUTER_API_KEY is not configured; use ANALYSIS_ENGINE=rubric instead.")

    return ChatOpenAI(
        model=settings.openrouter_model,
        api_key=settings.openrouter_api_key,
        base_url=OPENROUTER_BASE_URL,
        temperature=temperature,
        max_retries=2,
        model_kwargs={"response_format": {"type": "json_object"}},
        # OpenRouter attribution headers
        default_headers={
            "HTTP-Referer": "https://exposure-engine.local",
            "X-Title": "Exposure Engine",
        },
    )


def parse_json_safely(text: str) -> dict[str, Any] | list[Any] | None:
    """
    Robustly extract and parse a JSON object or array from LLM output.

    Handles cases where the LLM wraps JSON in markdown code fences like:
        ```json
        { ... }
        ```

    Returns the parsed Python object, or None if parsing fails.
    """
    if not text:
        return None

    cleaned = re.sub(r"```(?:json)?\s*([\s\S]*?)```", r"\1", text.strip()).strip()

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        pass

    # First {...} or [...] block in surrounding prose
    for pattern in (r"\{[\s\S]*\}", r"\[[\s\S]*\]"):
        match = re.search(pattern, cleaned)
        if match:
            try:
                return json.loads(match.group())
            except json.JSONDecodeError:
                continue

    logger.warning("Could not parse JSON from LLM output: %s", text[:200])
    return None


def truncate_for_context(text: str, max_chars: int = 8000) -> str:
    """
    Trim a string to max_chars to avoid exceeding the LLM context window.
    Appends '...' if truncated.
    """
    if not text or len(text) <= max_chars:
        return text or ""
    return text[:max_chars] + "..."
