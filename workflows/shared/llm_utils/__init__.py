"""LLM utilities for the visualization workflow.

This module provides Anthropic Claude model integration with:
- Tiered model selection (Haiku/Sonnet)
- A uniform judgment call contract (system prompt + user message -> text)
- Strict schema validation of JSON judgments, with no output repair
"""

from .errors import JudgmentError, MalformedJudgmentError
from .judgment import (
    AnthropicJudgmentClient,
    JudgeOptions,
    JudgmentClient,
    judge_structured,
)
from .models import ModelTier, get_llm
from .response_parsing import (
    extract_response_content,
    parse_structured,
    strip_code_fences,
)

__all__ = [
    "ModelTier",
    "get_llm",
    "JudgmentClient",
    "AnthropicJudgmentClient",
    "JudgeOptions",
    "judge_structured",
    "JudgmentError",
    "MalformedJudgmentError",
    "parse_structured",
    "strip_code_fences",
    "extract_response_content",
]
