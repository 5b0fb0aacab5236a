"""Run-based log rotation manager.

Provides run lifecycle management for module-based logging. A "run" is a
logical unit of work (one document analysis or a test module) that triggers
log rotation on first write to each module's log file.

Usage:
    from core.logging import start_run, end_run

    start_run("analysis-abc123")  # Triggers rotation on first log to each module
    try:
        # ... do work ...
    finally:
        end_run()
"""

from contextvars import ContextVar

# Both must be ContextVars so concurrent analysis runs don't share state
_current_run_id: ContextVar[str | None] = ContextVar("current_run_id", default=None)
_rotated_this_run: ContextVar[set[str] | None] = ContextVar("rotated_this_run", default=None)

# Module-to-log resolution cache, shared across runs
_module_log_cache: dict[str, str] = {}

# Mapping from module path prefixes to log file names
# Uses longest-prefix-match to resolve module paths to log names
# Unmapped modules go to "misc.log"
MODULE_TO_LOG = {
    # Workflows
    "workflows.visualize": "visualize",
    "workflows.visualize.scheduler": "scheduler",
    "workflows.shared": "workflows-shared",
    "workflows.shared.llm_utils": "judgment",
    # Core modules
    "core.generation": "generation",
    "core.utils": "utils",
    "core.config": "config",
    "core.logging": "logging-internal",
    # Services
    "services.visualizer": "api",
    "testing": "testing",
}

# Pre-sorted prefixes by length (longest first) for efficient matching
_SORTED_PREFIXES = sorted(MODULE_TO_LOG.keys(), key=len, reverse=True)


def start_run(run_id: str) -> None:
    """Signal start of new run.

    Triggers log rotation on first log message to each module within this run.
    Safe to call multiple times - subsequent calls reset the rotation tracking.

    Args:
        run_id: Unique identifier for this run (e.g., analysis id, test name)
    """
    _current_run_id.set(run_id)
    _rotated_this_run.set(set())


def end_run() -> None:
    """Signal end of run.

    Rotation is triggered by start_run(), so a missing end_run() call
    doesn't affect correctness.
    """
    _current_run_id.set(None)
    _rotated_this_run.set(None)


def get_current_run_id() -> str | None:
    """Get the current run ID, if any."""
    return _current_run_id.get()


def should_rotate(log_name: str) -> bool:
    """Check if rotation is needed for this log file.

    Returns True if we're in a run and this log file hasn't been rotated yet
    in it. Marks the log as rotated to prevent duplicate rotations.

    Args:
        log_name: The log file name (without .log extension)
    """
    run_id = _current_run_id.get()
    rotated = _rotated_this_run.get()

    if run_id is None or rotated is None:
        return False

    if log_name in rotated:
        return False

    rotated.add(log_name)
    return True


def module_to_log_name(module_name: str) -> str:
    """Resolve module path to log filename.

    Uses longest-prefix-match against MODULE_TO_LOG mapping.
    Results are cached.

    Args:
        module_name: The __name__ of the module (e.g., "core.generation.client")

    Returns:
        Log file name without extension (e.g., "generation")
    """
    if module_name not in _module_log_cache:
        _module_log_cache[module_name] = _compute_log_name(module_name)
    return _module_log_cache[module_name]


def _compute_log_name(module_name: str) -> str:
    """Find longest matching prefix in MODULE_TO_LOG."""
    for prefix in _SORTED_PREFIXES:
        if module_name == prefix or module_name.startswith(prefix + "."):
            return MODULE_TO_LOG[prefix]
    return "misc"
