"""Structured logging utilities.

Every record is a single JSON line with level, message, timestamp, logger
name and any keyword fields passed by the caller:

    log = get_logger(__name__)
    log.info("generation done", gen_id=3, n_evals=64)

The default stream is stderr so that CLI commands can keep stdout for their
JSON results. The initial level comes from EVOPROB_LOG_LEVEL (default WARN).
"""

from __future__ import annotations

import json
import os
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, TextIO

LEVELS = {"DEBUG": 0, "INFO": 1, "WARN": 2, "ERROR": 3}
_DEFAULT_LEVEL = os.environ.get("EVOPROB_LOG_LEVEL", "WARN")


@dataclass
class LogRecord:
    """Structured log record."""

    level: str
    message: str
    timestamp: float = field(default_factory=time.time)
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "message": self.message,
            "timestamp": self.timestamp,
            **self.data,
        }

    def to_json(self) -> str:
        # default=str keeps arbitrary field values (paths, arrays) loggable
        return json.dumps(self.to_dict(), default=str)


class StructuredLogger:
    """Minimal structured logger with JSON-lines output."""

    def __init__(
        self,
        name: str,
        output: TextIO | None = None,
        min_level: str = _DEFAULT_LEVEL,
    ) -> None:
        self.name = name
        self._output = output
        self._min_level = LEVELS.get(min_level.upper(), LEVELS["WARN"])

    @property
    def output(self) -> TextIO:
        # sys.stderr is looked up per call; it may be swapped after construction
        return self._output or sys.stderr

    def set_level(self, level: str) -> None:
        self._min_level = LEVELS.get(level.upper(), LEVELS["WARN"])

    def is_enabled(self, level: str) -> bool:
        return LEVELS.get(level, 0) >= self._min_level

    def _log(self, level: str, message: str, **data: Any) -> None:
        if not self.is_enabled(level):
            return
        record = LogRecord(level=level, message=message, data={"logger": self.name, **data})
        print(record.to_json(), file=self.output)

    def debug(self, message: str, **data: Any) -> None:
        """Log at DEBUG level."""
        self._log("DEBUG", message, **data)

    def info(self, message: str, **data: Any) -> None:
        """Log at INFO level."""
        self._log("INFO", message, **data)

    def warn(self, message: str, **data: Any) -> None:
        """Log at WARN level."""
        self._log("WARN", message, **data)

    def error(self, message: str, exc: BaseException | None = None, **data: Any) -> None:
        """Log at ERROR level, optionally attaching an exception summary."""
        if exc is not None:
            data = {"error_type": type(exc).__name__, "error": str(exc), **data}
        self._log("ERROR", message, **data)

    @contextmanager
    def timer(self, operation: str, **data: Any) -> Iterator[None]:
        """Context manager for timing operations.

        Usage:
            with log.timer("dispatch", pop_id=3):
                result = evaluate(schema, x, state)
        """
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed = time.perf_counter() - start
            self.debug(f"{operation} completed", elapsed_ms=elapsed * 1000, **data)


_loggers: dict[str, StructuredLogger] = {}


def get_logger(name: str) -> StructuredLogger:
    """Get or create a structured logger.

    Args:
        name: Logger name (typically __name__).

    Returns:
        StructuredLogger instance.
    """
    if name not in _loggers:
        _loggers[name] = StructuredLogger(name, min_level=_DEFAULT_LEVEL)
    return _loggers[name]


def set_log_level(level: str) -> None:
    """Set minimum log level for all existing and future loggers.

    Args:
        level: One of DEBUG, INFO, WARN, ERROR.
    """
    global _DEFAULT_LEVEL
    _DEFAULT_LEVEL = level.upper()
    for logger in _loggers.values():
        logger.set_level(level)
