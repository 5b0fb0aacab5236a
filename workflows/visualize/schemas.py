"""Schemas that judgment output must validate against.

Output that fails validation is classified as malformed and sends the calling
node down its deterministic fallback path. Nothing is repaired.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class PlannerSection(BaseModel):
    section_id: str = Field(min_length=1)
    heading: str = ""
    diagram_type: str = "mindmap"
    priority: Literal[1, 2] = 2
    skip: bool = False
    skip_reason: Optional[str] = None
    rationale: str = ""


class PlannerResponse(BaseModel):
    has_visualizable_content: bool
    reason: str = ""
    sections: list[PlannerSection] = Field(default_factory=list)


class EvaluationResponse(BaseModel):
    worthy: bool
    reason: str = ""
    confidence: float = Field(ge=0.0, le=1.0)
    visualization_potential: Literal["high", "medium", "low", "none"] = "medium"


class ProposedSegment(BaseModel):
    title: str = ""
    text: str = ""
    diagram_type: str = ""
    priority: Optional[Literal[1, 2]] = None


class SegmentationResponse(BaseModel):
    segments: list[ProposedSegment]
