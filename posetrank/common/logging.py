"""Structured JSON logging module for posetrank."""

import json
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from filelock import FileLock

DEFAULT_LOG_PATH = Path("data/logs/posetrank.jsonl")

_analysis_id: ContextVar[str | None] = ContextVar("analysis_id", default=None)
_log_path: Path = DEFAULT_LOG_PATH


def generate_id() -> str:
    """Generate a UUID with timestamp-based fallback.

    Returns:
        UUID string, or an ISO8601 timestamp with microseconds as fallback

    Example:
        >>> id = generate_id()
        >>> isinstance(id, str)
        True
        >>> len(id) > 0
        True
    """
    try:
        return str(uuid.uuid4())
    except OSError:
        # No entropy source available
        return datetime.now(tz=UTC).isoformat()


def set_analysis_id(analysis_id: str | None) -> None:
    """Set the analysis ID for the current context.

    Args:
        analysis_id: Analysis ID string or None to clear

    Example:
        >>> set_analysis_id("abc123")
        >>> get_analysis_id()
        'abc123'
        >>> set_analysis_id(None)
        >>> get_analysis_id() is None
        True
    """
    _analysis_id.set(analysis_id)


def get_analysis_id() -> str | None:
    """Get the current analysis ID from context."""
    return _analysis_id.get()


class JSONLogger:
    """Logger that writes JSON Lines to a file with consistent metadata.

    A logger created without an explicit path follows the process-wide path
    set by ``configure_logging``.
    """

    def __init__(self, name: str, log_path: str | Path | None = None):
        self.name = name
        self._fixed_path = Path(log_path) if log_path is not None else None

    @property
    def log_path(self) -> Path:
        """Get the log file path."""
        return self._fixed_path if self._fixed_path is not None else _log_path

    @log_path.setter
    def log_path(self, value: str | Path) -> None:
        """Pin this logger to a specific file."""
        self._fixed_path = Path(value)

    def _serialize_value(self, value: Any) -> Any:
        """Convert non-serializable values to a JSON-friendly representation.

        Large extension counts stay exact because Python ints serialize
        without loss.
        """
        if isinstance(value, (str, int, float, bool, type(None))):
            return value
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self._serialize_value(v) for v in value]
        if isinstance(value, dict):
            return {str(k): self._serialize_value(v) for k, v in value.items()}
        return str(value)

    def _log(self, level: str, message: str, metadata: dict[str, Any] | None = None) -> None:
        """Write a log entry as a JSON line.

        Args:
            level: Log level (e.g., "info", "error", "warning", "debug")
            message: Log message
            metadata: Optional metadata dict to include in log entry
        """
        entry = {
            "timestamp": datetime.now(tz=UTC).isoformat(),
            "level": level,
            "logger": self.name,
            "message": message,
        }

        analysis_id = get_analysis_id()
        if analysis_id:
            entry["analysis_id"] = analysis_id

        if metadata:
            entry["metadata"] = self._serialize_value(metadata)

        json_line = json.dumps(entry, ensure_ascii=False)

        path = self.log_path
        path.parent.mkdir(parents=True, exist_ok=True)
        lock_path = path.with_suffix(path.suffix + ".lock")
        with FileLock(lock_path):
            with path.open("a", encoding="utf-8") as f:
                f.write(json_line + "\n")

    def info(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        self._log("info", message, metadata)

    def error(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        self._log("error", message, metadata)

    def warning(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        self._log("warning", message, metadata)

    def debug(self, message: str, metadata: dict[str, Any] | None = None) -> None:
        self._log("debug", message, metadata)


_loggers: dict[str, JSONLogger] = {}


def configure_logging(log_path: str | Path) -> None:
    """Route every logger without a pinned path to ``log_path``.

    Args:
        log_path: Destination JSONL file, created on first write
    """
    global _log_path
    _log_path = Path(log_path)


def get_log_path() -> Path:
    """Return the process-wide log path."""
    return _log_path


def get_logger(name: str) -> JSONLogger:
    """Get or create a logger with the given name.

    Args:
        name: Logger name (typically module name, e.g., "ranking.extensions")

    Returns:
        JSONLogger instance
    """
    if name not in _loggers:
        _loggers[name] = JSONLogger(name)
    return _loggers[name]
