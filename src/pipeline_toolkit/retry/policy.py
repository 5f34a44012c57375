"""
Retry policy and per-attempt records.

A RetryPolicy is an immutable description of how an operation should be
retried: how many attempts, how much total time, the delay bounds and the
jitter range, plus the hooks the engine invokes between attempts and when
a limit is reached. Build a fresh policy per call site.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Union

UNBOUNDED: float = math.inf
"""Sentinel for "no limit" on any policy limit."""

DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_MIN_DELAY_MS = 100


class LimitReason(str, Enum):
    """Which policy limit stopped the retry loop."""

    ATTEMPTS = "attempts"
    ELAPSED = "elapsed"


OnFailure = Callable[[Exception, int, float, float], Union[bool, Awaitable[bool]]]
"""(error, attempt_number, next_delay_ms, total_elapsed_ms) -> keep retrying?"""

OnLimitReached = Callable[[Exception, int, LimitReason, float], Union[Any, Awaitable[Any]]]
"""(error, attempt_number, reason, total_elapsed_ms) -> None, may raise."""


def _always_retry(error: Exception, attempt_number: int, next_delay_ms: float, total_elapsed_ms: float) -> bool:
    return True


@dataclass(frozen=True)
class RetryPolicy:
    """
    Declarative retry policy.

    Attributes:
        max_attempts: Attempt limit. 0 and UNBOUNDED both mean unbounded.
        max_total_elapsed_ms: Elapsed-time limit measured from the first attempt
        min_delay_ms: Base delay before the first retry
        max_delay_ms: Cap on the base delay, applied before jitter
        max_jitter_ms: Upper bound of the random delay added to each base delay
        on_failure: Hook called after each failure that did not hit a limit.
            Returning False aborts; raising propagates.
        on_limit_reached: Hook called once when a limit is exceeded. True
            raises RetryLimitExceeded, False silently gives up.
    """

    max_attempts: float = DEFAULT_MAX_ATTEMPTS
    max_total_elapsed_ms: float = UNBOUNDED
    min_delay_ms: float = DEFAULT_MIN_DELAY_MS
    max_delay_ms: float = UNBOUNDED
    max_jitter_ms: float = 0
    on_failure: OnFailure = _always_retry
    on_limit_reached: Union[OnLimitReached, bool] = True

    def __post_init__(self) -> None:
        """Validate policy invariants."""
        for name in ("max_attempts", "max_total_elapsed_ms", "min_delay_ms", "max_delay_ms", "max_jitter_ms"):
            value = getattr(self, name)
            if value is None or value < 0:
                raise ValueError(f"{name} must be >= 0 (use UNBOUNDED for no limit)")

    @property
    def attempt_limit(self) -> float:
        """Effective attempt limit, with the zero sentinel mapped to UNBOUNDED."""
        return UNBOUNDED if self.max_attempts == 0 else self.max_attempts

    def base_delay_ms(self, attempt_number: int) -> float:
        """Pre-jitter delay after failed attempt `attempt_number` (1-based)."""
        return min(self.max_delay_ms, 2 ** (attempt_number - 1) * self.min_delay_ms)


@dataclass(frozen=True)
class Attempt:
    """
    Record of one loop iteration.

    Attributes:
        attempt_number: 1-based attempt counter
        started_at: Clock reading (ms) when the attempt began
        error: Exception raised by the operation (None on success)
        computed_delay_ms: Base delay + jitter scheduled after this attempt
            (None when no further attempt was scheduled)
    """

    attempt_number: int
    started_at: float
    error: Exception | None = None
    computed_delay_ms: float | None = None
