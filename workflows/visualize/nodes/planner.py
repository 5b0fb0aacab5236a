"""Document planner: which sections deserve a diagram, and what kind.

One judgment call over the whole section list. Malformed output falls back to
a deterministic largest-sections plan; a failed call is fatal to the run.
"""

import logging
import re
from typing import Optional

from langsmith import traceable

from workflows.shared.llm_utils import (
    JudgeOptions,
    JudgmentClient,
    JudgmentError,
    MalformedJudgmentError,
    ModelTier,
    judge_structured,
)
from workflows.visualize.config import VisualizeConfig
from workflows.visualize.prompts import PLANNER_SYSTEM
from workflows.visualize.schemas import PlannerResponse
from workflows.visualize.state import (
    DIAGRAM_ARCHETYPES,
    DocumentInput,
    Plan,
    PlanItem,
    Section,
)

logger = logging.getLogger(__name__)

_INDEX_ID = re.compile(r"^section-(\d+)$")

# Checked in order; first substring match wins
_PAGE_TYPES = (
    (("chatgpt.com", "chat.openai.com"), "ChatGPT conversation"),
    (("claude.ai",), "Claude conversation"),
    (("arxiv.org",), "research paper"),
    (("wikipedia.org",), "encyclopedia article"),
    (("github.com",), "code repository page"),
    (("medium.com", "substack.com"), "blog post"),
    (("docs.",), "documentation"),
)


class PlanningError(Exception):
    """The planner could not produce a plan. Fatal to the run."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def detect_page_type(url: str) -> str:
    """Coarse page type from the document URL, used as a planning hint."""
    if not url:
        return "unknown"
    lowered = url.lower()
    for needles, page_type in _PAGE_TYPES:
        if any(needle in lowered for needle in needles):
            return page_type
    return "web page"


def _describe_section(section: Section, preview_chars: int) -> str:
    flags = []
    if section.has_code:
        flags.append("Contains code")
    if section.has_table:
        flags.append("Contains table")
    if section.has_figure:
        flags.append("Contains figure")
    preview = section.text[:preview_chars]
    if len(section.text) > preview_chars:
        preview += "..."
    return (
        f"Section ID: {section.id}\n"
        f'Heading: "{section.heading}"\n'
        f"Word Count: {section.word_count}\n"
        f"Metadata: {', '.join(flags) or 'None'}\n"
        f"Text Preview: {preview}"
    )


def build_planner_message(document: DocumentInput, config: VisualizeConfig) -> str:
    sections = "\n\n".join(
        _describe_section(s, config.planner_preview_chars) for s in document.sections
    )
    return (
        f"Document Title: {document.title}\n"
        f"Document URL: {document.url}\n"
        f"Total Word Count: {document.total_word_count}\n"
        f"Page Type: {detect_page_type(document.url)}\n\n"
        f"Sections Found:\n{sections}\n\n"
        "Decide which sections are worth visualizing. Use the exact Section ID "
        "values above for section_id."
    )


def resolve_section(
    section_id: str, heading: str, document: DocumentInput
) -> Optional[Section]:
    """Match a planner item to an input section.

    Tries the exact id, then the section-N index form, then a
    case-insensitive heading match.
    """
    for section in document.sections:
        if section.id == section_id:
            return section

    match = _INDEX_ID.match(section_id.strip().lower())
    if match:
        index = int(match.group(1))
        if 0 <= index < len(document.sections):
            return document.sections[index]

    needle = heading.strip().lower()
    if needle:
        for section in document.sections:
            if section.heading and needle in section.heading.lower():
                return section
    return None


def create_fallback_plan(
    document: DocumentInput,
    config: VisualizeConfig,
    reason_prefix: str | None = None,
) -> Plan:
    """Admit the largest sections above the minimum word count.

    The largest gets priority 1, the others priority 2.
    """
    candidates = [s for s in document.sections if s.word_count > config.planner_min_words]
    candidates.sort(key=lambda s: s.word_count, reverse=True)
    chosen = candidates[: config.planner_fallback_sections]

    items = [
        PlanItem(
            section_id=section.id,
            heading=section.heading or "Section",
            diagram_archetype="mindmap",
            priority=1 if index == 0 else 2,
            admitted=True,
            rationale="Fallback: largest sections by word count",
        )
        for index, section in enumerate(chosen)
    ]

    if items:
        reason = "Attempting to visualize the largest sections"
    else:
        reason = "No substantial content sections found"
    if reason_prefix:
        reason = f"{reason_prefix}: {reason}"

    logger.info(f"Fallback plan: {len(items)} sections ({reason})")
    return Plan(admitted=bool(items), reason=reason, items=items, used_fallback=True)


def _plan_from_response(
    response: PlannerResponse, document: DocumentInput, config: VisualizeConfig
) -> Plan:
    items: list[PlanItem] = []
    seen: set[str] = set()
    admitted_count = 0

    for proposed in response.sections:
        section = resolve_section(proposed.section_id, proposed.heading, document)
        if section is None:
            logger.warning(f"Planner referenced unknown section {proposed.section_id}")
            continue
        if section.id in seen:
            continue
        seen.add(section.id)

        admitted = not proposed.skip
        if admitted:
            if admitted_count >= config.max_plan_items:
                continue
            admitted_count += 1

        archetype = proposed.diagram_type.strip().lower()
        if archetype not in DIAGRAM_ARCHETYPES:
            archetype = "mindmap"

        items.append(
            PlanItem(
                section_id=section.id,
                heading=proposed.heading or section.heading or "Section",
                diagram_archetype=archetype,
                priority=proposed.priority,
                admitted=admitted,
                rationale=proposed.rationale or proposed.skip_reason or "",
            )
        )

    admitted = response.has_visualizable_content and admitted_count > 0
    reason = response.reason or (
        "Content can be visualized" if admitted else "No visualizable content found"
    )
    return Plan(admitted=admitted, reason=reason, items=items)


@traceable(run_type="chain", name="VisualizePlanner")
async def create_plan(
    document: DocumentInput,
    judge: JudgmentClient,
    config: VisualizeConfig | None = None,
) -> Plan:
    """Decide which sections to visualize.

    Args:
        document: Document with at least one section
        judge: Judgment client
        config: Policy settings (defaults if None)

    Returns:
        Plan; admitted is False when nothing is worth visualizing

    Raises:
        PlanningError: Document has no sections, or the judgment call failed
    """
    config = config or VisualizeConfig()
    if not document.sections:
        raise PlanningError("Document has no sections")

    message = build_planner_message(document, config)
    try:
        response = await judge_structured(
            judge,
            PLANNER_SYSTEM,
            message,
            PlannerResponse,
            JudgeOptions(tier=ModelTier.SONNET, temperature=0.2, stage="planner"),
        )
    except MalformedJudgmentError as e:
        logger.warning(f"Planner output malformed, using fallback plan: {e.message}")
        return create_fallback_plan(document, config)
    except JudgmentError as e:
        raise PlanningError(f"Planning failed: {e.message}") from e

    plan = _plan_from_response(response, document, config)

    if (
        not plan.admitted
        and config.force_admit_min_words is not None
        and document.total_word_count >= config.force_admit_min_words
    ):
        override = create_fallback_plan(document, config, reason_prefix="Planner override")
        if override.admitted:
            logger.info(
                f"Overriding planner rejection ({plan.reason}) for "
                f"{document.total_word_count}-word document"
            )
            return override

    logger.info(
        f"Plan: admitted={plan.admitted}, {len(plan.admitted_items)} of "
        f"{len(document.sections)} sections"
    )
    return plan
