"""
Terminal outcomes of a classifying workflow run.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Success:
    """The operation completed; `value` is its result."""
    value: Any


@dataclass(frozen=True)
class AbortedBySkip:
    """The workflow decided not to proceed. Not an error."""
    reason: str


@dataclass(frozen=True)
class FailedFatally:
    """The workflow failed for a non-skippable reason."""
    error: Exception


Outcome = Union[Success, AbortedBySkip, FailedFatally]


def outcome_to_dict(outcome: Outcome) -> dict:
    """JSON-serializable view of an outcome (Celery results, logs)."""
    if isinstance(outcome, Success):
        value = outcome.value
        if hasattr(value, "model_dump"):
            value = value.model_dump(mode="json")
        return {"outcome": "success", "value": value}
    if isinstance(outcome, AbortedBySkip):
        return {"outcome": "aborted", "reason": outcome.reason}
    return {
        "outcome": "fatal",
        "error": str(outcome.error),
        "error_type": type(outcome.error).__name__,
    }
