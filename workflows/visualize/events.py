"""Lifecycle events and the ordered stream that carries them.

Events are emitted in completion order with two fixed points: plan (or
no_content) opens the stream before any section event, and exactly one of
complete or error closes it.
"""

import asyncio
import logging
from typing import Annotated, AsyncIterator, Literal, Optional, Union

from pydantic import BaseModel, Field

from workflows.visualize.state import PlanItem

logger = logging.getLogger(__name__)


class EventOrderError(RuntimeError):
    """An event was emitted out of the allowed order."""

    pass


class PlanEvent(BaseModel):
    type: Literal["plan"] = "plan"
    items: list[PlanItem]
    reason: str = ""


class DiagramEvent(BaseModel):
    type: Literal["diagram"] = "diagram"
    section_id: str
    segment_id: Optional[str] = None
    title: str
    artifact: str


class SectionErrorEvent(BaseModel):
    type: Literal["section_error"] = "section_error"
    section_id: str
    heading: str = ""
    reason: str
    outcome: Literal["rejected", "failed", "skipped"]


class NoContentEvent(BaseModel):
    type: Literal["no_content"] = "no_content"
    reason: str


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    message: str


class CompleteEvent(BaseModel):
    type: Literal["complete"] = "complete"
    artifacts: int = 0


StreamEvent = Annotated[
    Union[
        PlanEvent,
        DiagramEvent,
        SectionErrorEvent,
        NoContentEvent,
        ErrorEvent,
        CompleteEvent,
    ],
    Field(discriminator="type"),
]

_OPENING = ("plan", "no_content")
_SECTION = ("diagram", "section_error")
_TERMINAL = ("complete", "error")


def to_ndjson(event: BaseModel) -> str:
    """Serialize one event as a newline-terminated JSON line."""
    return event.model_dump_json() + "\n"


class StreamEmitter:
    """Ordered, single-consumer event stream for one run.

    emit() is synchronous so that quota commits and their diagram events can
    happen without an intervening suspension point.

    Usage:
        emitter = StreamEmitter()
        emitter.emit(PlanEvent(items=plan.items))
        ...
        async for event in emitter.events():
            yield to_ndjson(event)
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._history: list[BaseModel] = []
        self._opened_with: Optional[str] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def history(self) -> list[BaseModel]:
        return list(self._history)

    def emit(self, event: BaseModel) -> None:
        """Queue an event, enforcing stream ordering.

        Raises:
            EventOrderError: Stream already closed, opened twice, section
                event before plan, or complete before the stream opened
        """
        kind = event.type
        if self._closed:
            raise EventOrderError(f"Cannot emit {kind}: stream already closed")

        if kind in _OPENING:
            if self._opened_with is not None:
                raise EventOrderError(
                    f"Cannot emit {kind}: stream already opened with {self._opened_with}"
                )
            self._opened_with = kind
        elif kind in _SECTION:
            if self._opened_with != "plan":
                raise EventOrderError(f"Cannot emit {kind} before plan")
        elif kind == "complete" and self._opened_with is None:
            raise EventOrderError("Cannot emit complete before plan or no_content")

        if kind in _TERMINAL:
            self._closed = True

        logger.debug(f"Event: {kind}")
        self._history.append(event)
        self._queue.put_nowait(event)

    async def events(self) -> AsyncIterator[BaseModel]:
        """Yield queued events until the terminal one."""
        while True:
            event = await self._queue.get()
            yield event
            if event.type in _TERMINAL:
                return
