"""
Main entry points for the visualization workflow.

run_visualization() drives one analysis run and guarantees that exactly one
terminal event (complete or error) reaches the emitter. stream_visualization()
wraps it as an async iterator of events for streaming transports.
"""

import asyncio
import logging
import uuid
from typing import Any, AsyncIterator, Literal, Optional

from pydantic import BaseModel, Field

from core.generation import AuthFailureError, DiagramGenerator, get_generation_service
from core.logging import end_run, start_run
from workflows.shared.llm_utils import AnthropicJudgmentClient, JudgmentClient
from workflows.shared.retry_utils import Sleep
from workflows.visualize.config import VisualizeConfig
from workflows.visualize.events import CompleteEvent, ErrorEvent, StreamEmitter
from workflows.visualize.graph import visualize_graph
from workflows.visualize.nodes import PlanningError
from workflows.visualize.scheduler import RunContext
from workflows.visualize.state import DocumentInput, Plan, SectionOutcome

logger = logging.getLogger(__name__)


class VisualizationResult(BaseModel):
    """Summary of one run, alongside the events it emitted."""

    run_id: str
    status: Literal["success", "no_content", "error"]
    plan: Optional[Plan] = None
    outcomes: list[SectionOutcome] = Field(default_factory=list)
    artifact_count: int = 0
    error: Optional[str] = None


async def run_visualization(
    document: DocumentInput,
    emitter: StreamEmitter,
    judge: Optional[JudgmentClient] = None,
    generator: Optional[DiagramGenerator] = None,
    config: Optional[VisualizeConfig] = None,
    sleep: Optional[Sleep] = None,
) -> VisualizationResult:
    """Run the full plan -> evaluate -> segment -> generate pipeline.

    Args:
        document: Extracted document sections
        emitter: Receives every lifecycle event, ending with complete or error
        judge: Judgment client (Claude by default)
        generator: Diagram generator (the shared generation service by default)
        config: Policy settings (defaults if None)
        sleep: Sleep used between rate-limit retries (asyncio.sleep by default)

    Returns:
        VisualizationResult; never raises for run failures, which are reported
        as an error event instead
    """
    config = config or VisualizeConfig()
    run_id = uuid.uuid4()
    start_run(f"visualize-{run_id}")

    context = RunContext(
        judge=judge or AnthropicJudgmentClient(),
        generator=generator or get_generation_service(),
        emitter=emitter,
        config=config,
        sleep=sleep,
    )

    logger.info(
        f"Starting visualization of '{document.title[:80]}' "
        f"({len(document.sections)} sections, {document.total_word_count} words)"
    )

    def fail(message: str) -> VisualizationResult:
        logger.error(f"Run {run_id} aborted: {message}")
        emitter.emit(ErrorEvent(message=message))
        return VisualizationResult(run_id=str(run_id), status="error", error=message)

    try:
        if not document.sections:
            return fail("Invalid document: no sections")

        try:
            state: dict[str, Any] = await asyncio.wait_for(
                visualize_graph.ainvoke(
                    {"document": document, "config": config, "outcomes": []},
                    config={
                        "run_id": run_id,
                        "run_name": f"visualize:{document.title[:30]}",
                        "configurable": {"run_context": context},
                    },
                ),
                timeout=config.run_timeout,
            )
        except asyncio.TimeoutError:
            return fail(f"Run timed out after {config.run_timeout:.0f}s")
        except PlanningError as e:
            return fail(e.message)
        except AuthFailureError as e:
            return fail(f"Diagram service authentication failed: {e.message}")
        except Exception as e:
            logger.exception(f"Unexpected error in run {run_id}: {e}")
            return fail(f"Internal error: {e}")

        plan: Optional[Plan] = state.get("plan")
        artifact_count = state.get("artifact_count", 0)
        emitter.emit(CompleteEvent(artifacts=artifact_count))

        status = "success" if plan is not None and plan.admitted else "no_content"
        logger.info(f"Run {run_id} complete: {status}, {artifact_count} artifacts")
        return VisualizationResult(
            run_id=str(run_id),
            status=status,
            plan=plan,
            outcomes=state.get("outcomes", []),
            artifact_count=artifact_count,
        )
    finally:
        end_run()


async def stream_visualization(
    document: DocumentInput,
    judge: Optional[JudgmentClient] = None,
    generator: Optional[DiagramGenerator] = None,
    config: Optional[VisualizeConfig] = None,
    sleep: Optional[Sleep] = None,
) -> AsyncIterator[BaseModel]:
    """Yield run events as they happen, ending with the terminal event.

    Closing the iterator early cancels the run.

    Example:
        async for event in stream_visualization(document):
            print(to_ndjson(event), end="")
    """
    emitter = StreamEmitter()
    task = asyncio.create_task(
        run_visualization(document, emitter, judge, generator, config, sleep)
    )
    try:
        async for event in emitter.events():
            yield event
        await task
    finally:
        if not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
