"""
State schemas for the visualization workflow.

Documents arrive as extracted sections; the planner turns them into plan
items, the segmenter into segments, and the scheduler reports one outcome per
admitted section. RunState holds the run-wide artifact quota and call slots
shared by every concurrent section task.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Literal, Optional
from typing_extensions import TypedDict

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.generation import Artifact
from workflows.shared.text_utils import count_words
from workflows.visualize.config import VisualizeConfig

DiagramArchetype = Literal["flowchart", "mindmap", "timeline", "comparison"]
DIAGRAM_ARCHETYPES: tuple[str, ...] = ("flowchart", "mindmap", "timeline", "comparison")


# =============================================================================
# Input
# =============================================================================


class Section(BaseModel):
    """One extracted unit of document text with a heading."""

    model_config = ConfigDict(frozen=True)

    id: str
    heading: str = ""
    text: str = ""
    word_count: int = Field(default=0, ge=0)
    has_code: bool = False
    has_table: bool = False
    has_figure: bool = False
    figure_caption: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _derive_word_count(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("word_count"):
            data = {**data, "word_count": count_words(data.get("text") or "")}
        return data


class DocumentInput(BaseModel):
    """A document as supplied by the extractor."""

    title: str = ""
    url: str = ""
    sections: list[Section] = Field(default_factory=list)

    @property
    def total_word_count(self) -> int:
        return sum(s.word_count for s in self.sections)


# =============================================================================
# Planning
# =============================================================================


class PlanItem(BaseModel):
    """The planner's decision about one section."""

    model_config = ConfigDict(frozen=True)

    section_id: str
    heading: str
    diagram_archetype: DiagramArchetype = "mindmap"
    priority: Literal[1, 2] = 2
    admitted: bool = True
    rationale: str = ""


class Plan(BaseModel):
    """Whole-document plan."""

    admitted: bool
    reason: str
    items: list[PlanItem] = Field(default_factory=list)
    used_fallback: bool = False

    @property
    def admitted_items(self) -> list[PlanItem]:
        return [item for item in self.items if item.admitted]


# =============================================================================
# Evaluation and segmentation
# =============================================================================


class Evaluation(BaseModel):
    """Quality-gate verdict for one text unit."""

    worthy: bool
    reason: str
    confidence: float = Field(ge=0.0, le=1.0)
    potential: Literal["high", "medium", "low", "none"]


class Segment(BaseModel):
    """A generation-sized unit of one section's text.

    text is always an exact substring of the source section's text.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    text: str
    diagram_archetype: DiagramArchetype
    priority: Literal[1, 2] = 2
    word_count: int
    source_section_id: str


class SectionOutcome(BaseModel):
    """Terminal result for one admitted section."""

    section_id: str
    heading: str = ""
    status: Literal["done", "rejected", "errored", "skipped"]
    artifacts: list[Artifact] = Field(default_factory=list)
    reason: Optional[str] = None


# =============================================================================
# Run-wide shared state
# =============================================================================


class RunState:
    """Artifact quota and external-call slots for one analysis run.

    Generation takes a quota reservation before calling out. A successful
    call commits the reservation, a failed one releases it. While every
    remaining unit of quota is reserved by in-flight work, further
    reservations wait instead of over-admitting, which keeps
    total_artifacts_emitted <= max_artifacts under any interleaving.
    """

    def __init__(self, max_artifacts: int, max_concurrency: int):
        self.max_artifacts = max_artifacts
        self.max_concurrency = max_concurrency
        self.total_artifacts_emitted = 0
        self.concurrency_in_use = 0
        self._reserved = 0
        self._condition = asyncio.Condition()
        self._call_slots = asyncio.Semaphore(max_concurrency)

    @property
    def quota_exhausted(self) -> bool:
        return self.total_artifacts_emitted >= self.max_artifacts

    @property
    def reserved(self) -> int:
        return self._reserved

    async def try_reserve(self) -> bool:
        """Reserve one unit of quota, or return False once it is spent."""
        async with self._condition:
            while True:
                if self.total_artifacts_emitted >= self.max_artifacts:
                    return False
                if self.total_artifacts_emitted + self._reserved < self.max_artifacts:
                    self._reserved += 1
                    return True
                await self._condition.wait()

    async def commit(self) -> None:
        async with self._condition:
            self._reserved -= 1
            self.total_artifacts_emitted += 1
            self._condition.notify_all()

    async def release(self) -> None:
        async with self._condition:
            self._reserved -= 1
            self._condition.notify_all()

    @asynccontextmanager
    async def call_slot(self) -> AsyncIterator[None]:
        """Hold one of max_concurrency external-call slots."""
        async with self._call_slots:
            self.concurrency_in_use += 1
            try:
                yield
            finally:
                self.concurrency_in_use -= 1


# =============================================================================
# Graph state
# =============================================================================


class VisualizeState(TypedDict, total=False):
    """LangGraph state for one analysis run."""

    document: DocumentInput
    config: VisualizeConfig
    plan: Optional[Plan]
    outcomes: list[SectionOutcome]
    artifact_count: int
