"""
Pytest configuration for diagramlens tests.

Scripted fakes for the judgment model and the diagram service live in
testing.utils; this module provides per-module logging runs and shared
fixtures.

Usage:
    pytest testing/
    pytest testing/test_scheduler.py -k quota
"""

from collections.abc import Generator

import pytest

from core.logging import end_run, start_run
from testing.utils import RecordingSleep


@pytest.fixture(autouse=True)
def logging_run(request: pytest.FixtureRequest) -> Generator[None, None, None]:
    """Rotate logs at test module boundaries.

    Each test module gets its own logging run, which triggers log rotation
    on first write to each module's log file.

    When running with pytest-xdist, each worker uses a separate log directory
    to prevent file corruption from concurrent writes.
    """
    import os

    worker_id = os.environ.get("PYTEST_XDIST_WORKER")
    if worker_id:
        os.environ["DIAGRAMLENS_LOG_DIR"] = f"logs/test-{worker_id}"

    test_path = request.node.nodeid.split("::")[0]
    test_name = test_path.replace("/", "-").replace(".py", "")
    start_run(f"test-{test_name}")
    yield
    end_run()


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests requiring external services",
    )


@pytest.fixture
def fake_sleep() -> RecordingSleep:
    return RecordingSleep()
