"""Types for the diagram generation service."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class GenerationStatus(str, Enum):
    """Lifecycle of a generation request, owned by the service."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class GenerationRequest(BaseModel):
    """Observed state of one generation request."""

    request_id: str
    status: GenerationStatus
    artifact_refs: list[str] = Field(default_factory=list)

    @property
    def is_terminal(self) -> bool:
        return self.status in (GenerationStatus.COMPLETED, GenerationStatus.FAILED)


class SubmitOptions(BaseModel):
    """Optional submit payload fields."""

    style_id: str | None = None
    language: str | None = None
    context_before: str | None = None
    context_after: str | None = None


class Artifact(BaseModel):
    """Sanitized diagram content and where it came from."""

    model_config = ConfigDict(frozen=True)

    content: str
    source_section_id: str
    source_segment_id: str | None = None
    fingerprint: str
    cached: bool = False
