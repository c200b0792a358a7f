"""Glyph-prefixed status lines for the operator.

Every line is also recorded through structlog so the log file carries the
same narrative as the terminal.
"""

import sys
from typing import Any, TextIO

import structlog

from ..models.enums import StepStatus

logger = structlog.get_logger("migration")

_LOG_LEVELS = {
    StepStatus.SUCCESS: "info",
    StepStatus.INFO: "info",
    StepStatus.WARNING: "warning",
    StepStatus.FATAL: "error",
}


class StatusReporter:
    """Prints operator diagnostics to a stream (stdout by default)."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def emit(self, status: StepStatus, message: str, **context: Any) -> None:
        print(f"{status.glyph} {message}", file=self.stream, flush=True)
        getattr(logger, _LOG_LEVELS[status])(message, status=status.value, **context)

    def success(self, message: str, **context: Any) -> None:
        self.emit(StepStatus.SUCCESS, message, **context)

    def fatal(self, message: str, **context: Any) -> None:
        self.emit(StepStatus.FATAL, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self.emit(StepStatus.WARNING, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self.emit(StepStatus.INFO, message, **context)
