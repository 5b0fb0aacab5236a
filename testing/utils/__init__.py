"""
Shared testing utilities for diagramlens tests.

- fakes: Scripted judgment client, diagram generator and sleep recorder
- text helpers: Synthetic section text with and without structural signals
"""

from .fakes import (
    WORTHY,
    FakeGenerator,
    FakeJudge,
    RecordingSleep,
    echo_segments,
    plain_text,
    planner_response,
    structured_text,
    text_under_judgment,
)

__all__ = [
    # fakes
    "FakeJudge",
    "FakeGenerator",
    "RecordingSleep",
    "planner_response",
    "echo_segments",
    "WORTHY",
    # text helpers
    "structured_text",
    "plain_text",
    "text_under_judgment",
]
