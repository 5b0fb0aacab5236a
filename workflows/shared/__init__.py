"""Shared utilities for workflows."""

from .llm_utils import (
    AnthropicJudgmentClient,
    JudgeOptions,
    JudgmentClient,
    JudgmentError,
    MalformedJudgmentError,
    ModelTier,
    get_llm,
    judge_structured,
)
from .retry_utils import linear_delay, with_retry
from .text_utils import (
    count_words,
    find_normalized,
    first_words,
    truncate,
    word_spans,
)

__all__ = [
    # Text utilities
    "count_words",
    "find_normalized",
    "first_words",
    "truncate",
    "word_spans",
    # Retry
    "with_retry",
    "linear_delay",
    # LLM utilities
    "ModelTier",
    "get_llm",
    "JudgmentClient",
    "AnthropicJudgmentClient",
    "JudgeOptions",
    "judge_structured",
    "JudgmentError",
    "MalformedJudgmentError",
]
