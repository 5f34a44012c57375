"""
Failure classification for staged remote operations.

Every failure raised inside a workflow attempt is translated into exactly
one of three classifications:

- Transient: infrastructure hiccup, hand back to the RetryEngine
- Abort: the goal is unreachable or already reached, stop quietly
- Fatal: retrying is pointless or wrong, propagate immediately

The translation depends on the Stage that raised the failure: a 404 while
observing means the change disappeared before we looked, a 404 while
acting means it disappeared between look and act.
"""

from dataclasses import dataclass
from typing import Optional, Union

from pipeline_toolkit.clients.exceptions import TransportError
from pipeline_toolkit.errors import MergeNotAppliedError
from pipeline_toolkit.models.enums import ChangeState, Stage
from pipeline_toolkit.models.review_models import ChangeSnapshot

RETRYABLE_STATUS_CODES = frozenset({408, 429})

# Abort / Fatal reasons (asserted verbatim by callers and tests)
CHANGE_NO_LONGER_EXISTS = "change no longer exists"
ALREADY_MERGED = "already merged"
MARKED_AS_DRAFT = "marked as draft"
NO_LONGER_OPEN = "no longer open"
TARGET_VANISHED = "this task's own target vanished"
HEAD_OUT_OF_SYNC = "HEAD is out of sync"
MERGE_ATTEMPT_FAILED = "merge attempt failed"


@dataclass(frozen=True)
class Transient:
    """Retry after backoff."""
    reason: str
    error: Optional[Exception] = None


@dataclass(frozen=True)
class Abort:
    """Stop quietly; resolves as a no-op success."""
    reason: str


@dataclass(frozen=True)
class Fatal:
    """Stop and propagate."""
    reason: str
    error: Optional[Exception] = None


Classification = Union[Transient, Abort, Fatal]


class ClassifiedFailure(Exception):
    """
    Raised from inside an attempt when the body already knows the outcome.

    Used for conditions discovered on successful calls (e.g. the fetched
    change is already merged) so they travel through the same hook path as
    transport failures.
    """

    def __init__(self, classification: Classification):
        super().__init__(classification.reason)
        self.classification = classification


def is_retryable_status(status_code: Optional[int]) -> bool:
    """408, 429 and every 5xx are worth retrying."""
    if status_code is None:
        return False
    return status_code in RETRYABLE_STATUS_CODES or status_code >= 500


def snapshot_abort_reason(snapshot: ChangeSnapshot) -> Optional[str]:
    """Reason to skip merging `snapshot`, or None if it is mergeable."""
    if snapshot.merged:
        return ALREADY_MERGED
    if snapshot.draft:
        return MARKED_AS_DRAFT
    if snapshot.state != ChangeState.OPEN:
        return NO_LONGER_OPEN
    return None


def _unclassified(error: Exception) -> Fatal:
    if isinstance(error, TransportError) and error.status_code is not None:
        return Fatal(f"unexpected status {error.status_code}: {error}", error)
    return Fatal(f"unexpected failure: {error}", error)


def classify_observe_failure(error: Exception) -> Classification:
    """Classify a failure raised while reading the current remote state."""
    if isinstance(error, ClassifiedFailure):
        return error.classification
    if isinstance(error, TransportError):
        if error.status_code == 404:
            return Abort(CHANGE_NO_LONGER_EXISTS)
        if is_retryable_status(error.status_code):
            return Transient(f"status {error.status_code}", error)
    return _unclassified(error)


def classify_act_failure(error: Exception) -> Classification:
    """Classify a failure raised while applying the state change."""
    if isinstance(error, ClassifiedFailure):
        return error.classification
    if isinstance(error, MergeNotAppliedError):
        return Fatal(MERGE_ATTEMPT_FAILED, error)
    if isinstance(error, TransportError):
        if error.status_code == 404:
            return Abort(TARGET_VANISHED)
        if error.status_code == 409:
            return Abort(HEAD_OUT_OF_SYNC)
        if is_retryable_status(error.status_code):
            return Transient(f"status {error.status_code}", error)
    return _unclassified(error)


def classify_failure(stage: Stage, error: Exception) -> Classification:
    """Dispatch to the classifier for `stage`."""
    if stage == Stage.OBSERVE:
        return classify_observe_failure(error)
    return classify_act_failure(error)
