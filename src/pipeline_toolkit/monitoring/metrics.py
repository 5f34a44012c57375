"""Custom Prometheus metrics for the pipeline toolkit.

Updated by the retrying workflows (never by the RetryEngine itself).
Alert rules should be configured for:
- workflow_outcomes_total{outcome="fatal"} (pipelines failing on retried steps)
- retry_attempts_total{classification="transient"} (flaky external services)
"""

from prometheus_client import Counter, Histogram

# === Retry Metrics ===

retry_attempts_total = Counter(
    "retry_attempts_total",
    "Total failed attempts by workflow and classification",
    ["workflow", "classification"],
)
"""
Failed attempts counter.

Labels:
- workflow: automerge, install_verification
- classification: transient, abort, fatal

Alert thresholds:
- WARN: transient rate > 10% of attempts
"""

retry_delay_seconds = Histogram(
    "retry_delay_seconds",
    "Scheduled delay before the next attempt, jitter included",
    ["workflow"],
    buckets=[0.1, 0.5, 1.0, 5.0, 10.0, 20.0, 30.0, 40.0, 60.0],
)
"""
Backoff delay histogram.

Buckets cover the automerge/install range (10s base, 30s cap, 5s jitter).
"""

# === Workflow Metrics ===

workflow_outcomes_total = Counter(
    "workflow_outcomes_total",
    "Total workflow runs by terminal outcome",
    ["workflow", "outcome"],
)
"""
Workflow terminal outcomes.

Labels:
- workflow: automerge, install_verification
- outcome: success, aborted, fatal, limit_exceeded
"""
