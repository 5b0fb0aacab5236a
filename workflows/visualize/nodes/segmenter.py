"""Split one section's text into generation-sized, source-faithful segments.

Every segment text is an exact substring of the input. Proposed segments
whose leading span cannot be found in the source are replaced by a
mechanically extracted window of source words.
"""

import logging
import re

from workflows.shared.llm_utils import (
    JudgeOptions,
    JudgmentClient,
    JudgmentError,
    ModelTier,
    judge_structured,
)
from workflows.shared.text_utils import (
    count_words,
    find_normalized,
    first_words,
    truncate,
    word_spans,
)
from workflows.visualize.config import VisualizeConfig
from workflows.visualize.prompts import SEGMENTER_SYSTEM
from workflows.visualize.schemas import ProposedSegment, SegmentationResponse
from workflows.visualize.state import DIAGRAM_ARCHETYPES, Segment

logger = logging.getLogger(__name__)

_GENERIC_TITLE = re.compile(
    r"^(?:(?:section|part|segment|chapter)\s*[\w.-]*"
    r"|introduction|content|contents|overview|untitled|text)$",
    re.IGNORECASE,
)
_CONTEXT_PREFIX = re.compile(r"^(?:section|selected content)\s*:\s*", re.IGNORECASE)
_LAST_RESORT_CHARS = 500
_TITLE_WORDS = 6


def is_generic_title(title: str) -> bool:
    return not title.strip() or bool(_GENERIC_TITLE.match(title.strip()))


def _context_label(context: str) -> str:
    return _CONTEXT_PREFIX.sub("", context.strip()).strip()


def _descriptive_title(title: str, context: str, text: str) -> str:
    if not is_generic_title(title):
        return title.strip()
    label = _context_label(context)
    lead = first_words(text, _TITLE_WORDS)
    if label and lead:
        return f"{label}: {lead}..."
    if label:
        return label
    return f"{lead}..." if lead else "Content Analysis"


def _verified_span(
    source: str,
    spans: list[tuple[int, int]],
    proposal: str,
    config: VisualizeConfig,
) -> str | None:
    """The exact source span a proposal came from, or None if unverifiable."""
    candidate = proposal.strip()
    if len(candidate) < config.segment_min_chars:
        return None

    whole = find_normalized(source, candidate)
    if whole is not None:
        return source[whole[0] : whole[1]]

    lead = find_normalized(source, candidate[: config.segment_verify_chars])
    if lead is None:
        return None

    start = lead[0]
    following = [span for span in spans if span[1] > start][: count_words(candidate)]
    return source[start : following[-1][1]]


def _window_span(
    source: str,
    spans: list[tuple[int, int]],
    index: int,
    proposal_count: int,
    config: VisualizeConfig,
) -> str:
    """Contiguous source words for the index-th of proposal_count windows."""
    window = min(config.segment_window_words, len(spans) // max(proposal_count, 1))
    chosen = spans[index * window : (index + 1) * window] if window > 0 else []
    if not chosen:
        return ""
    return source[chosen[0][0] : chosen[-1][1]]


def _fallback_segment(
    text: str, context: str, section_id: str, archetype: str, config: VisualizeConfig
) -> Segment:
    limit = min(config.segment_fallback_chars, config.generation_max_chars)
    segment_text = truncate(text[:limit].strip(), config.generation_max_chars)
    return Segment(
        id="segment-1",
        title=_context_label(context) or "Content Analysis",
        text=segment_text,
        diagram_archetype=archetype,
        priority=1,
        word_count=count_words(segment_text),
        source_section_id=section_id,
    )


def _build_segment(
    index: int,
    proposal: ProposedSegment,
    proposal_count: int,
    text: str,
    spans: list[tuple[int, int]],
    context: str,
    section_id: str,
    archetype: str,
    config: VisualizeConfig,
) -> Segment:
    segment_text = _verified_span(text, spans, proposal.text, config)
    if segment_text is None:
        logger.warning(
            f"Segment {index + 1} of {section_id} not found in source, re-extracting"
        )
        segment_text = _window_span(text, spans, index, proposal_count, config)
    if len(segment_text.strip()) < config.segment_min_chars:
        segment_text = text[:_LAST_RESORT_CHARS]

    segment_text = truncate(segment_text.strip(), config.generation_max_chars)

    hint = proposal.diagram_type.strip().lower()
    return Segment(
        id=f"segment-{index + 1}",
        title=_descriptive_title(proposal.title, context, segment_text),
        text=segment_text,
        diagram_archetype=hint if hint in DIAGRAM_ARCHETYPES else archetype,
        priority=proposal.priority or (1 if index < 2 else 2),
        word_count=count_words(segment_text),
        source_section_id=section_id,
    )


async def segment_content(
    text: str,
    context: str,
    judge: JudgmentClient,
    config: VisualizeConfig | None = None,
    *,
    section_id: str = "",
    archetype: str = "mindmap",
) -> list[Segment]:
    """
    Split text into self-contained segments with descriptive titles.

    Args:
        text: Section text (full, not truncated)
        context: Short label such as "Section: Method"
        judge: Judgment client
        config: Policy settings (defaults if None)
        section_id: Source section id recorded on each segment
        archetype: Archetype used when a proposal's hint is unknown

    Returns:
        At least one Segment; every text is an exact substring of text

    Raises:
        ValueError: If text is empty
    """
    config = config or VisualizeConfig()
    if not text or not text.strip():
        raise ValueError("Text content cannot be empty")
    if archetype not in DIAGRAM_ARCHETYPES:
        archetype = "mindmap"

    word_count = count_words(text)
    analysis = text[: config.segmenter_analysis_chars]
    truncated = len(text) > config.segmenter_analysis_chars
    message = (
        (f"Context: {context}\n\n" if context else "")
        + f"Text Content ({word_count} words):\n\n{analysis}"
        + ("\n\n[Content truncated for analysis]" if truncated else "")
        + "\n\nIdentify the most important visualizable segments. Copy each "
        "segment's text verbatim from the input above."
    )

    try:
        response = await judge_structured(
            judge,
            SEGMENTER_SYSTEM,
            message,
            SegmentationResponse,
            JudgeOptions(
                tier=ModelTier.SONNET, max_tokens=4096, temperature=0.3, stage="segmenter"
            ),
        )
    except JudgmentError as e:
        logger.warning(f"Segmentation failed for {section_id}, using one segment: {e.message}")
        return [_fallback_segment(text, context, section_id, archetype, config)]

    proposals = response.segments[: config.segmenter_max_segments]
    if not proposals:
        logger.warning(f"No segments proposed for {section_id}, using one segment")
        return [_fallback_segment(text, context, section_id, archetype, config)]

    spans = word_spans(text)
    segments = [
        _build_segment(
            index, proposal, len(proposals), text, spans, context, section_id, archetype, config
        )
        for index, proposal in enumerate(proposals)
    ]

    for segment in segments:
        logger.debug(
            f"Segment {segment.id}: '{segment.title}' ({segment.word_count} words, "
            f"{segment.diagram_archetype})"
        )
    return segments
