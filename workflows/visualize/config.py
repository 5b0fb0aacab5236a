"""Policy settings for the visualization workflow.

Word-count thresholds, confidence cutoffs, segment caps, retry delays and the
run quota are heuristics, so every one of them is a named field that callers
can override per run.
"""

from typing import Optional

from pydantic import BaseModel, Field


class VisualizeConfig(BaseModel):
    """Per-run configuration for planning, gating, segmenting and scheduling."""

    # Quota and concurrency
    max_artifacts: int = Field(default=2, ge=0, description="Diagrams per run")
    max_concurrency: int = Field(
        default=2, ge=1, description="External calls in flight at once"
    )
    max_concurrent_sections: int = Field(
        default=2, ge=1, description="Sections processed at once"
    )
    max_segments_per_section: int = Field(default=2, ge=1)

    # Retry
    max_retries: int = Field(default=3, ge=0)
    retry_base_delay: float = Field(
        default=5.0, ge=0, description="Seconds x attempt when no retry_after"
    )

    # Run
    run_timeout: float = Field(default=300.0, gt=0, description="Whole-run seconds")

    # Planner
    planner_preview_chars: int = Field(default=600, ge=50)
    max_plan_items: int = Field(default=8, ge=1)
    planner_fallback_sections: int = Field(default=3, ge=1)
    planner_min_words: int = Field(
        default=50, ge=0, description="Fallback plan needs more words than this"
    )
    force_admit_min_words: Optional[int] = Field(
        default=None,
        ge=1,
        description="Use the fallback plan when the planner rejects a document "
        "at least this long; disabled when None",
    )

    # Evaluator
    evaluator_min_words: int = Field(default=15, ge=0)
    evaluator_fast_path_words: int = Field(default=60, ge=0)
    evaluator_substantial_words: int = Field(default=80, ge=0)
    evaluator_trust_threshold: float = Field(default=0.75, ge=0.0, le=1.0)
    evaluator_max_chars: int = Field(default=3000, ge=100)

    # Segmenter
    segmenter_analysis_chars: int = Field(default=8000, ge=100)
    segmenter_max_segments: int = Field(default=7, ge=1)
    segment_min_chars: int = Field(default=50, ge=1)
    segment_verify_chars: int = Field(default=50, ge=1)
    segment_window_words: int = Field(default=400, ge=1)
    segment_fallback_chars: int = Field(default=2000, ge=1)

    # Generation
    generation_max_chars: int = Field(default=2000, ge=1)
    style_by_content_type: dict[str, Optional[str]] = Field(
        default_factory=lambda: {"text": None, "code": None, "table": None},
        description="Generation style id per manual-mode content type",
    )

    def style_for(self, content_type: str) -> Optional[str]:
        return self.style_by_content_type.get(
            content_type, self.style_by_content_type.get("text")
        )
