"""
Reporting sinks for human-readable progress notices.

Workflows emit one notice per transient failure (with the next-delay
estimate) and one notice on the final abort or fatal error. Sinks are
fire-and-forget and are never consulted for control flow.
"""

from typing import Protocol
import structlog


class ReportingSink(Protocol):
    """Receives one-line progress notices."""

    def notice(self, message: str) -> None:
        ...


class StructlogReporter:
    """Writes each notice as a structlog info event."""

    def __init__(self, name: str = "pipeline_toolkit.notices", **context):
        self._logger = structlog.get_logger(name).bind(**context)

    def notice(self, message: str) -> None:
        self._logger.info(message)
