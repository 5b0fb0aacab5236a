"""
Graph construction for the visualization workflow.

START -> plan -> execute -> END, with plan routing straight to END when the
planner finds nothing worth visualizing. Run collaborators (judge, generator,
emitter) travel in the RunnableConfig under configurable.run_context.
"""

import logging
from typing import Any

from langgraph.graph import END, START, StateGraph
from langgraph.types import RunnableConfig
from langsmith import traceable

from workflows.visualize.events import NoContentEvent, PlanEvent
from workflows.visualize.nodes import create_plan
from workflows.visualize.scheduler import RunContext, SectionScheduler
from workflows.visualize.state import VisualizeState

logger = logging.getLogger(__name__)


def _run_context(config: RunnableConfig) -> RunContext:
    return config["configurable"]["run_context"]


@traceable(run_type="chain", name="VisualizePlanNode")
async def plan_node(state: VisualizeState, config: RunnableConfig) -> dict[str, Any]:
    """Plan the document and open the event stream."""
    context = _run_context(config)
    plan = await create_plan(state["document"], context.judge, state["config"])

    if plan.admitted:
        context.emitter.emit(PlanEvent(items=plan.admitted_items, reason=plan.reason))
    else:
        context.emitter.emit(NoContentEvent(reason=plan.reason))

    return {"plan": plan}


@traceable(run_type="chain", name="VisualizeExecuteNode")
async def execute_node(state: VisualizeState, config: RunnableConfig) -> dict[str, Any]:
    """Run the scheduler over every admitted section."""
    context = _run_context(config)
    scheduler = SectionScheduler(context)
    outcomes = await scheduler.run(state["plan"], state["document"])
    return {
        "outcomes": outcomes,
        "artifact_count": scheduler.run_state.total_artifacts_emitted,
    }


def route_after_plan(state: VisualizeState) -> str:
    plan = state.get("plan")
    if plan is not None and plan.admitted:
        return "execute"
    return END


def create_visualize_graph() -> StateGraph:
    """Create the visualization workflow graph."""
    builder = StateGraph(VisualizeState)

    builder.add_node("plan", plan_node)
    builder.add_node("execute", execute_node)

    builder.add_edge(START, "plan")
    builder.add_conditional_edges("plan", route_after_plan, ["execute", END])
    builder.add_edge("execute", END)

    return builder.compile()


visualize_graph = create_visualize_graph()
