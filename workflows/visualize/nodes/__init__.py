"""Workflow nodes: planning, evaluation, segmentation and section preparation."""

from .evaluator import evaluate_content, has_structural_signal
from .planner import (
    PlanningError,
    create_fallback_plan,
    create_plan,
    detect_page_type,
    resolve_section,
)
from .preprocess import PreparedSection, prepare_section
from .segmenter import is_generic_title, segment_content

__all__ = [
    "create_plan",
    "create_fallback_plan",
    "detect_page_type",
    "resolve_section",
    "PlanningError",
    "evaluate_content",
    "has_structural_signal",
    "segment_content",
    "is_generic_title",
    "prepare_section",
    "PreparedSection",
]
