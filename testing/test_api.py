"""Tests for the visualizer HTTP API.

TestClient is used without its context manager so the lifespan (log file
setup, client cleanup) does not run.
"""

import json

import pytest
from fastapi.testclient import TestClient

from core.generation import (
    AuthFailureError,
    GenerationFailedError,
    GenerationTimeoutError,
    RateLimitedError,
)
from services.visualizer.app.main import (
    app,
    get_generator,
    get_judge,
    get_visualize_config,
)
from testing.utils import (
    WORTHY,
    FakeGenerator,
    FakeJudge,
    echo_segments,
    planner_response,
    structured_text,
)
from workflows.shared.llm_utils import JudgmentError
from workflows.visualize import VisualizeConfig


@pytest.fixture
def fakes():
    state = {
        "judge": FakeJudge(
            {
                "planner": planner_response(("s1", 1)),
                "segmenter": echo_segments(1),
                "evaluator": WORTHY,
            }
        ),
        "generator": FakeGenerator(),
        "config": VisualizeConfig(max_retries=0),
    }
    app.dependency_overrides[get_judge] = lambda: state["judge"]
    app.dependency_overrides[get_generator] = lambda: state["generator"]
    app.dependency_overrides[get_visualize_config] = lambda: state["config"]
    yield state
    app.dependency_overrides.clear()


@pytest.fixture
def client(fakes) -> TestClient:
    return TestClient(app)


def _document() -> dict:
    return {
        "title": "Pipelines",
        "url": "https://docs.example.com",
        "sections": [
            {"id": "s1", "heading": "Method", "text": structured_text("s1")},
        ],
    }


def _lines(response) -> list[dict]:
    return [json.loads(line) for line in response.text.splitlines() if line.strip()]


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert "timestamp" in response.json()


class TestAnalyze:
    def test_streams_ndjson_events(self, client):
        response = client.post("/analyze", json={"document": _document()})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/x-ndjson")
        events = _lines(response)
        assert [e["type"] for e in events] == ["plan", "diagram", "complete"]
        assert events[1]["section_id"] == "s1"
        assert events[1]["artifact"].startswith("<svg>")
        assert events[2]["artifacts"] == 1

    def test_planner_failure_streams_error(self, client, fakes):
        fakes["judge"] = FakeJudge({"planner": JudgmentError("unreachable")})

        response = client.post("/analyze", json={"document": _document()})

        assert response.status_code == 200
        events = _lines(response)
        assert [e["type"] for e in events] == ["error"]

    def test_empty_document_streams_error(self, client):
        response = client.post("/analyze", json={"document": {"title": "Empty"}})
        assert [e["type"] for e in _lines(response)] == ["error"]

    def test_invalid_body(self, client):
        response = client.post("/analyze", json={"document": {"sections": [{"text": "x"}]}})
        assert response.status_code == 422


class TestGenerate:
    def test_generates_per_segment(self, client):
        response = client.post("/generate", json={"text": structured_text("ingest")})

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 1
        assert body["results"][0]["segment_id"] == "segment-1"

    def test_empty_text(self, client):
        response = client.post("/generate", json={"text": "   "})
        assert response.status_code == 400

    def test_invalid_content_type(self, client):
        response = client.post("/generate", json={"text": "x", "content_type": "image"})
        assert response.status_code == 422

    def test_rate_limited(self, client, fakes):
        fakes["generator"] = FakeGenerator(
            failures={"selection": [RateLimitedError(retry_after=30)]}
        )

        response = client.post("/generate", json={"text": structured_text("ingest")})

        assert response.status_code == 429
        assert response.json() == {"error": "Rate limit exceeded", "retry_after": 30}

    @pytest.mark.parametrize(
        "error,status",
        [
            (GenerationTimeoutError("slow"), 504),
            (AuthFailureError("bad token"), 502),
            (GenerationFailedError("no file"), 502),
        ],
    )
    def test_generation_errors(self, client, fakes, error, status):
        fakes["generator"] = FakeGenerator(failures={"selection": [error]})

        response = client.post("/generate", json={"text": structured_text("ingest")})

        assert response.status_code == status

    def test_no_diagrams(self, client, fakes):
        fakes["judge"] = FakeJudge({"segmenter": JudgmentError("down")})

        response = client.post("/generate", json={"text": "Tiny text."})

        assert response.status_code == 500
