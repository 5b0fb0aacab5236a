"""Scripted stand-ins for the judgment model and the diagram service.

FakeJudge returns scripted judgment output per stage, FakeGenerator returns
artifacts (or scripted errors) per section. RecordingSleep replaces
asyncio.sleep in retry paths so tests observe delays without waiting.
"""

import asyncio
import json
import re
from typing import Any, Callable, Optional

from core.generation import Artifact, SubmitOptions
from core.utils.caching import generate_cache_key
from workflows.shared.llm_utils import JudgeOptions, JudgmentError

_TEXT_BLOCK = re.compile(r"words\):\n\n(.*?)(?:\n\n\[Content truncated|\n\n[A-Z])", re.DOTALL)

# Text helpers
# ---------------------------------------------------------------------------


def structured_text(topic: str, sentences: int = 8) -> str:
    """Long text with structure keywords (passes the evaluator fast path)."""
    return " ".join(
        f"Step {i} of the {topic} process transforms the input and passes the "
        f"result to the next stage."
        for i in range(1, sentences + 1)
    )


def plain_text(words: int) -> str:
    """Lower-case text with no structural signals."""
    base = "the cat sat on the mat and looked at the sky while rain fell".split()
    return " ".join(base[i % len(base)] for i in range(words))


def text_under_judgment(user_message: str) -> str:
    """The passage embedded in an evaluator or segmenter user message."""
    match = _TEXT_BLOCK.search(user_message)
    return match.group(1) if match else ""


# ---------------------------------------------------------------------------
# Judgment fakes
# ---------------------------------------------------------------------------

Response = Any  # str | dict | Exception | Callable[[str], Any]


class FakeJudge:
    """Scripted JudgmentClient keyed by JudgeOptions.stage.

    A response may be a raw string, a dict (serialized as JSON), an exception
    (raised), or a callable taking the user message and returning any of
    those.
    """

    def __init__(self, responses: Optional[dict[str, Response]] = None):
        self.responses = responses or {}
        self.calls: list[tuple[Optional[str], str]] = []

    def calls_for(self, stage: str) -> list[str]:
        return [message for s, message in self.calls if s == stage]

    async def judge(
        self,
        system_prompt: str,
        user_message: str,
        options: Optional[JudgeOptions] = None,
    ) -> str:
        stage = options.stage if options else None
        self.calls.append((stage, user_message))
        await asyncio.sleep(0)

        response = self.responses.get(stage)
        if callable(response) and not isinstance(response, type):
            response = response(user_message)
        if isinstance(response, BaseException):
            raise response
        if response is None:
            raise JudgmentError(f"No scripted response for stage {stage}", stage=stage)
        if isinstance(response, (dict, list)):
            return json.dumps(response)
        return response


def planner_response(
    *items: tuple[str, int], admitted: bool = True, reason: str = "Has structure"
) -> dict:
    """Planner JSON admitting (section_id, priority) pairs."""
    return {
        "has_visualizable_content": admitted,
        "reason": reason,
        "sections": [
            {
                "section_id": section_id,
                "heading": f"Heading {section_id}",
                "diagram_type": "flowchart",
                "priority": priority,
                "skip": False,
                "rationale": "Describes a process",
            }
            for section_id, priority in items
        ],
    }


def echo_segments(count: int) -> Callable[[str], dict]:
    """Segmenter response splitting the passage into count verbatim segments."""

    def respond(user_message: str) -> dict:
        words = text_under_judgment(user_message).split()
        size = max(1, len(words) // count)
        return {
            "segments": [
                {
                    "title": f"Stage group {i + 1} of the pipeline",
                    "text": " ".join(words[i * size : (i + 1) * size]),
                    "diagram_type": "flowchart",
                    "priority": 1,
                }
                for i in range(count)
            ]
        }

    return respond


WORTHY = {
    "worthy": True,
    "reason": "Describes a process",
    "confidence": 0.9,
    "visualization_potential": "high",
}


# ---------------------------------------------------------------------------
# Generation fakes
# ---------------------------------------------------------------------------


class FakeGenerator:
    """DiagramGenerator returning one artifact per call.

    failures maps a section id to exceptions raised, in order, by its next
    calls before calls start succeeding.
    """

    def __init__(
        self,
        failures: Optional[dict[str, list[Exception]]] = None,
        delay: float = 0.0,
    ):
        self.failures = failures or {}
        self.delay = delay
        self.calls: list[tuple[str, str, Optional[str]]] = []
        self.options: list[Optional[SubmitOptions]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def section_order(self) -> list[str]:
        return [section_id for _, section_id, _ in self.calls]

    async def generate(
        self,
        text: str,
        options: Optional[SubmitOptions] = None,
        section_id: str = "",
        segment_id: Optional[str] = None,
    ) -> Artifact:
        self.calls.append((text, section_id, segment_id))
        self.options.append(options)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            pending = self.failures.get(section_id)
            if pending:
                raise pending.pop(0)
            return Artifact(
                content=f"<svg><text>{section_id}/{segment_id}</text></svg>",
                source_section_id=section_id,
                source_segment_id=segment_id,
                fingerprint=generate_cache_key(text),
            )
        finally:
            self.in_flight -= 1


class RecordingSleep:
    """Stand-in for asyncio.sleep that records delays and yields once."""

    def __init__(self):
        self.delays: list[float] = []

    @property
    def total(self) -> float:
        return sum(self.delays)

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)
