"""Module-based logging with run-based rotation.

Every analysis run (and every test module) is a logging run: the first record
written to a module's log file within a run rotates the previous run's file.

Usage:
    # At run entry points (analysis runs, tests):
    from core.logging import start_run, end_run

    start_run("analysis-123")
    try:
        ...
    finally:
        end_run()

    # In modules:
    import logging
    logger = logging.getLogger(__name__)
    logger.info("Routed to the module's log file")

Log files are created in logs/ (override with DIAGRAMLENS_LOG_DIR):
    - logs/visualize.log, logs/scheduler.log, logs/generation.log, ...
    - logs/run-3p.log (all third-party libraries)
    - logs/*.previous.log (previous run's logs)
"""

from core.logging.handlers import ModuleDispatchHandler, ThirdPartyHandler
from core.logging.run_manager import (
    MODULE_TO_LOG,
    end_run,
    get_current_run_id,
    module_to_log_name,
    start_run,
)

__all__ = [
    "start_run",
    "end_run",
    "get_current_run_id",
    "module_to_log_name",
    "ModuleDispatchHandler",
    "ThirdPartyHandler",
    "MODULE_TO_LOG",
]
