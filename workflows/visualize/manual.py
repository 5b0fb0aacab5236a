"""Manual mode: segment a user's selection and generate a diagram per segment."""

import logging
from typing import Optional

from pydantic import BaseModel

from core.generation import (
    AuthFailureError,
    DiagramGenerator,
    GenerationError,
    RateLimitedError,
    SubmitOptions,
    get_generation_service,
)
from workflows.shared.llm_utils import AnthropicJudgmentClient, JudgmentClient
from workflows.shared.retry_utils import Sleep, linear_delay, with_retry
from workflows.visualize.config import VisualizeConfig
from workflows.visualize.nodes import segment_content

logger = logging.getLogger(__name__)


class NoDiagramsError(Exception):
    """Every segment failed to produce a diagram."""

    def __init__(self, message: str, errors: list[str] | None = None):
        self.message = message
        self.errors = errors or []
        super().__init__(message)


class ManualResult(BaseModel):
    segment_id: str
    title: str
    artifact: str


def _selection_context(context_before: str | None, context_after: str | None) -> str:
    if context_before or context_after:
        return (
            f"Selected content (context: {context_before or ''} ... "
            f"{context_after or ''})"
        )
    return "Selected content"


async def generate_for_text(
    text: str,
    content_type: str = "text",
    context_before: Optional[str] = None,
    context_after: Optional[str] = None,
    judge: Optional[JudgmentClient] = None,
    generator: Optional[DiagramGenerator] = None,
    config: Optional[VisualizeConfig] = None,
    sleep: Optional[Sleep] = None,
) -> list[ManualResult]:
    """
    Generate diagrams for an arbitrary selection of text.

    Segments are generated one after another. A rate limit that survives
    retries stops the whole request; other per-segment failures are skipped.

    Args:
        text: Selected text
        content_type: "text", "code" or "table"; selects the style id
        context_before: Text preceding the selection
        context_after: Text following the selection
        judge: Judgment client (Claude by default)
        generator: Diagram generator (the shared generation service by default)
        config: Policy settings (defaults if None)
        sleep: Sleep used between rate-limit retries

    Returns:
        One result per generated segment, in segment order

    Raises:
        ValueError: If text is empty
        RateLimitedError: Rate limit persisted through every retry
        AuthFailureError: Credentials rejected
        NoDiagramsError: No segment produced a diagram
    """
    if not text or not text.strip():
        raise ValueError("Text is required")

    config = config or VisualizeConfig()
    judge = judge or AnthropicJudgmentClient()
    generator = generator or get_generation_service()

    context = _selection_context(context_before, context_after)
    segments = await segment_content(text, context, judge, config, section_id="selection")
    logger.info(f"Manual mode: {len(segments)} segments from {len(text)} chars")

    options = SubmitOptions(
        style_id=config.style_for(content_type),
        context_before=context_before,
        context_after=context_after,
    )

    results: list[ManualResult] = []
    errors: list[str] = []
    last_error: Optional[GenerationError] = None
    for segment in segments:
        if len(segment.text.strip()) < config.segment_min_chars:
            logger.warning(f"Skipping segment '{segment.title}': text too short")
            continue

        async def attempt():
            return await generator.generate(segment.text, options, "selection", segment.id)

        try:
            artifact = await with_retry(
                attempt,
                retry_on=RateLimitedError,
                max_retries=config.max_retries,
                delay=linear_delay(config.retry_base_delay),
                sleep=sleep,
                label=f"Manual generation {segment.id}",
            )
        except (RateLimitedError, AuthFailureError):
            raise
        except GenerationError as e:
            logger.warning(f"Segment '{segment.title}' failed: {e.message}")
            errors.append(e.message)
            last_error = e
            continue

        results.append(
            ManualResult(segment_id=segment.id, title=segment.title, artifact=artifact.content)
        )

    if not results:
        if last_error is not None and len(errors) == len(segments):
            raise last_error
        raise NoDiagramsError("No diagrams generated from segments", errors)
    return results
