"""diagramlens configuration and environment setup.

This module provides centralized configuration for diagramlens,
including development mode detection, LangSmith tracing setup and
module-based log file configuration.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Logger name prefixes that belong to this project; everything else is third-party
_PROJECT_PREFIXES = ("core", "workflows", "services", "testing")

_logging_configured = False


def is_dev_mode() -> bool:
    """Check if running in development mode.

    Returns:
        True if DIAGRAMLENS_MODE is set to 'dev', False otherwise.
    """
    return os.getenv("DIAGRAMLENS_MODE", "prod").lower() == "dev"


def configure_langsmith() -> None:
    """Configure LangSmith tracing based on DIAGRAMLENS_MODE.

    When DIAGRAMLENS_MODE=dev:
        - Enables LangSmith tracing
        - Sets project to 'diagramlens-dev'

    When DIAGRAMLENS_MODE=prod (or unset):
        - Disables LangSmith tracing

    This function is idempotent and safe to call multiple times.
    """
    if is_dev_mode():
        os.environ.setdefault("LANGSMITH_TRACING", "true")
        os.environ.setdefault("LANGSMITH_PROJECT", "diagramlens-dev")
    else:
        os.environ["LANGSMITH_TRACING"] = "false"


def get_log_dir() -> Path:
    """Resolve the log directory (DIAGRAMLENS_LOG_DIR, default ./logs)."""
    return Path(os.getenv("DIAGRAMLENS_LOG_DIR", "logs"))


class _ProjectFilter(logging.Filter):
    """Pass records from project modules (or, inverted, everything else)."""

    def __init__(self, project: bool):
        super().__init__()
        self.project = project

    def filter(self, record: logging.LogRecord) -> bool:
        is_project = record.name.split(".")[0] in _PROJECT_PREFIXES
        return is_project == self.project


def configure_logging(name: str | None = None, level: int = logging.INFO) -> None:
    """Install module-dispatch and third-party file handlers on the root logger.

    Project modules log to per-module files (see core.logging.MODULE_TO_LOG),
    third-party libraries share run-3p.log. Safe to call more than once.

    Args:
        name: Optional run identifier; starts a logging run when given
        level: Root log level
    """
    global _logging_configured

    from core.logging import ModuleDispatchHandler, ThirdPartyHandler, start_run

    if not _logging_configured:
        log_dir = get_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

        module_handler = ModuleDispatchHandler(log_dir)
        module_handler.setFormatter(formatter)
        module_handler.addFilter(_ProjectFilter(project=True))

        third_party_handler = ThirdPartyHandler(log_dir)
        third_party_handler.setFormatter(formatter)
        third_party_handler.addFilter(_ProjectFilter(project=False))

        root = logging.getLogger()
        root.setLevel(level)
        root.addHandler(module_handler)
        root.addHandler(third_party_handler)
        _logging_configured = True

    if name:
        start_run(name)
