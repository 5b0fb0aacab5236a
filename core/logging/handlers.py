"""Logging handlers that dispatch records to per-module files.

ModuleDispatchHandler resolves a record's logger name to a log file via
MODULE_TO_LOG and keeps one open stream per file. ThirdPartyHandler collects
everything else in run-3p.log. Both rotate current -> previous on the first
write of each run.

Writes are synchronous; an emit from inside the event loop costs a few
microseconds per record.
"""

import logging
from pathlib import Path
from typing import TextIO


def _rotate_log_file(log_dir: Path, log_name: str, stream: TextIO | None) -> TextIO:
    """Move <name>.log to <name>.previous.log and open a fresh stream.

    Args:
        log_dir: Directory containing log files
        log_name: Base name of the log file (without .log extension)
        stream: Existing stream to close, or None

    Returns:
        New file handle opened for appending.
    """
    current = log_dir / f"{log_name}.log"
    previous = log_dir / f"{log_name}.previous.log"

    if stream:
        stream.close()

    if previous.exists():
        previous.unlink()
    if current.exists():
        current.rename(previous)

    return current.open("a", encoding="utf-8")


class ModuleDispatchHandler(logging.Handler):
    """Single handler routing records to per-module log files.

    Streams are opened lazily and cached, so one handler serves every module
    without a FileHandler per file. At most two files exist per module
    (current and previous run).

    Usage:
        handler = ModuleDispatchHandler(Path("logs"))
        handler.setFormatter(logging.Formatter("%(asctime)s - %(message)s"))
        logging.getLogger().addHandler(handler)
    """

    def __init__(self, log_dir: Path):
        super().__init__()
        self.log_dir = log_dir
        self._file_cache: dict[str, TextIO] = {}

    def emit(self, record: logging.LogRecord) -> None:
        try:
            # Deferred import: run_manager is imported by the package __init__
            from core.logging.run_manager import module_to_log_name, should_rotate

            log_name = module_to_log_name(record.name)
            if should_rotate(log_name):
                self._file_cache[log_name] = _rotate_log_file(
                    self.log_dir, log_name, self._file_cache.pop(log_name, None)
                )

            stream = self._get_or_open_file(log_name)
            stream.write(self.format(record) + "\n")
            stream.flush()
        except Exception:
            self.handleError(record)

    def _get_or_open_file(self, log_name: str) -> TextIO:
        if log_name not in self._file_cache:
            path = self.log_dir / f"{log_name}.log"
            self._file_cache[log_name] = path.open("a", encoding="utf-8")
        return self._file_cache[log_name]

    def close(self) -> None:
        """Close all cached file handles."""
        self.acquire()
        try:
            for stream in self._file_cache.values():
                try:
                    stream.close()
                except OSError:
                    pass
            self._file_cache.clear()
        finally:
            self.release()
        super().close()


class ThirdPartyHandler(logging.FileHandler):
    """Handler collecting third-party library logs in run-3p.log."""

    LOG_NAME = "run-3p"

    def __init__(self, log_dir: Path, **kwargs):
        self.log_dir = log_dir
        super().__init__(
            log_dir / f"{self.LOG_NAME}.log", mode="a", encoding="utf-8", **kwargs
        )

    def emit(self, record: logging.LogRecord) -> None:
        try:
            from core.logging.run_manager import should_rotate

            if should_rotate(self.LOG_NAME):
                self.stream = _rotate_log_file(self.log_dir, self.LOG_NAME, self.stream)

            super().emit(record)
        except Exception:
            self.handleError(record)
