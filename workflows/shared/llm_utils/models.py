"""Model tier definitions and LLM initialization."""

import os
from enum import Enum
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()

from core.config import configure_langsmith

configure_langsmith()

from langchain_anthropic import ChatAnthropic


class ModelTier(Enum):
    """Model tiers for judgment calls.

    HAIKU: Per-unit gates (content evaluation)
    SONNET: Document-level decisions (planning, segmentation)
    """
    HAIKU = "claude-haiku-4-5-20251001"
    SONNET = "claude-sonnet-4-5-20250929"


def get_llm(
    tier: ModelTier = ModelTier.SONNET,
    max_tokens: int = 4096,
    temperature: Optional[float] = None,
) -> ChatAnthropic:
    """
    Get a configured Anthropic Claude LLM instance.

    Args:
        tier: Model tier selection (HAIKU, SONNET)
        max_tokens: Maximum output tokens
        temperature: Sampling temperature (model default if None)

    Returns:
        ChatAnthropic instance configured for the specified tier

    Raises:
        ValueError: If ANTHROPIC_API_KEY is not set
    """
    api_key = os.getenv("ANTHROPIC_API_KEY")
    if not api_key:
        raise ValueError("ANTHROPIC_API_KEY not set")

    kwargs: dict[str, Any] = {
        "model": tier.value,
        "api_key": api_key,
        "max_tokens": max_tokens,
    }
    if temperature is not None:
        kwargs["temperature"] = temperature

    return ChatAnthropic(**kwargs)
