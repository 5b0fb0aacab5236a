"""Diagram generation workflow for extracted documents.

Plans which sections of a document deserve a diagram, gates and segments
their text, and generates diagrams under a run-wide quota, streaming
lifecycle events as they happen.

Example:
    from workflows.visualize import DocumentInput, stream_visualization, to_ndjson

    document = DocumentInput.model_validate(payload)
    async for event in stream_visualization(document):
        print(to_ndjson(event), end="")
"""

from .config import VisualizeConfig
from .events import (
    CompleteEvent,
    DiagramEvent,
    ErrorEvent,
    EventOrderError,
    NoContentEvent,
    PlanEvent,
    SectionErrorEvent,
    StreamEmitter,
    StreamEvent,
    to_ndjson,
)
from .manual import ManualResult, NoDiagramsError, generate_for_text
from .nodes import PlanningError, create_plan, evaluate_content, segment_content
from .runner import VisualizationResult, run_visualization, stream_visualization
from .scheduler import RunContext, SectionScheduler
from .state import (
    DocumentInput,
    Evaluation,
    Plan,
    PlanItem,
    RunState,
    Section,
    SectionOutcome,
    Segment,
)

__all__ = [
    # Entry points
    "run_visualization",
    "stream_visualization",
    "generate_for_text",
    "VisualizationResult",
    "ManualResult",
    "NoDiagramsError",
    # Components
    "create_plan",
    "evaluate_content",
    "segment_content",
    "SectionScheduler",
    "RunContext",
    "PlanningError",
    # State
    "DocumentInput",
    "Section",
    "Plan",
    "PlanItem",
    "Segment",
    "Evaluation",
    "SectionOutcome",
    "RunState",
    "VisualizeConfig",
    # Events
    "StreamEmitter",
    "StreamEvent",
    "EventOrderError",
    "PlanEvent",
    "DiagramEvent",
    "SectionErrorEvent",
    "NoContentEvent",
    "ErrorEvent",
    "CompleteEvent",
    "to_ndjson",
]
