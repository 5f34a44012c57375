"""
Retry engine with exponential backoff, jitter and dual limits.

The engine executes a fallible, possibly side-effecting operation until it
succeeds or the policy gives up:

1. **Backoff**: 2^(n-1) * min_delay_ms, capped by max_delay_ms
2. **Jitter**: uniform(0, max_jitter_ms) added to every delay
3. **Limits**: attempts (0 = unbounded) and total elapsed time
4. **Hooks**: on_failure (retry / abort / raise), on_limit_reached

The engine is stage-agnostic. Failure classification lives in the
workflows built on top of it (see pipeline_toolkit.workflows).

Main Components:
    - RetryEngine: Executes operations under a RetryPolicy
    - RetryPolicy: Immutable per-call retry configuration
    - RetryAborted: on_failure asked the engine to stop
    - RetryLimitExceeded: Default outcome when a limit is reached

Usage:
    >>> from pipeline_toolkit.retry import RetryPolicy, attempt
    >>> result = await attempt(operation, RetryPolicy(max_attempts=3))
"""

from pipeline_toolkit.retry.engine import (
    RetryEngine,
    Sleeper,
    attempt,
    default_sleeper,
    instant_sleep,
    real_sleep,
)
from pipeline_toolkit.retry.exceptions import RetryAborted, RetryError, RetryLimitExceeded
from pipeline_toolkit.retry.policy import UNBOUNDED, Attempt, LimitReason, RetryPolicy

__all__ = [
    "UNBOUNDED",
    "Attempt",
    "LimitReason",
    "RetryAborted",
    "RetryEngine",
    "RetryError",
    "RetryLimitExceeded",
    "RetryPolicy",
    "Sleeper",
    "attempt",
    "default_sleeper",
    "instant_sleep",
    "real_sleep",
]
