"""Monitoring for the pipeline toolkit.

Exports Prometheus metrics and the progress-notice reporting sinks.
"""

from pipeline_toolkit.monitoring.metrics import (
    retry_attempts_total,
    retry_delay_seconds,
    workflow_outcomes_total,
)
from pipeline_toolkit.monitoring.reporting import ReportingSink, StructlogReporter

__all__ = [
    "ReportingSink",
    "StructlogReporter",
    "retry_attempts_total",
    "retry_delay_seconds",
    "workflow_outcomes_total",
]
