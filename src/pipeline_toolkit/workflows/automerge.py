"""
Automated pull request merge ("automerge").

Two stages, driven through the RetryEngine:

1. **Observe**: fetch the change and check it is still mergeable
   (not merged, not draft, open). Repeats until the fetch succeeds.
2. **Act**: merge pinned to the head commit seen during Observe. Retries
   re-use that head commit; a 409 means it went stale and is not retried.

Failure classification (see workflows.classification):

    Observe 404             -> Abort "change no longer exists"
    Act 404                 -> Abort "this task's own target vanished"
    Act 409                 -> Abort "HEAD is out of sync"
    408 / 429 / 5xx         -> Transient
    merge not applied       -> Fatal "merge attempt failed"
    anything else           -> Fatal

Usage:
    workflow = AutomergeWorkflow(GitHubReviewClient.from_settings(settings))
    outcome = await workflow.run(42)
"""

from typing import Optional

from pipeline_toolkit.clients.base_client import BaseReviewClient
from pipeline_toolkit.config import Settings
from pipeline_toolkit.errors import AutomergeLimitExceeded, MergeNotAppliedError
from pipeline_toolkit.models.enums import Stage
from pipeline_toolkit.models.review_models import ChangeSnapshot, MergeResult
from pipeline_toolkit.monitoring.reporting import ReportingSink
from pipeline_toolkit.retry.engine import RetryEngine
from pipeline_toolkit.retry.policy import UNBOUNDED, RetryPolicy
from pipeline_toolkit.workflows.base import ClassifyingWorkflow
from pipeline_toolkit.workflows.classification import Abort, ClassifiedFailure, snapshot_abort_reason
from pipeline_toolkit.workflows.outcome import FailedFatally, Outcome


def automerge_policy(settings: Settings) -> RetryPolicy:
    """
    Policy for automerge: unbounded attempts under an elapsed-time ceiling.

    With CAN_RETRY_AUTOMERGE disabled the merge is attempted exactly once.
    """
    return RetryPolicy(
        max_attempts=UNBOUNDED if settings.CAN_RETRY_AUTOMERGE else 1,
        max_total_elapsed_ms=settings.RETRY_CEILING_SECONDS * 1000,
        min_delay_ms=settings.RETRY_MIN_DELAY_MS,
        max_delay_ms=settings.RETRY_MAX_DELAY_MS,
        max_jitter_ms=settings.RETRY_MAX_JITTER_MS,
    )


class AutomergeWorkflow(ClassifyingWorkflow):
    """
    Single-use automerge of one change.

    Attributes:
        client: Remote change-review client
        change_id: Change being merged (set by run/execute)
        snapshot: Change state observed during Observe
    """

    workflow_name = "automerge"
    limit_error_class = AutomergeLimitExceeded

    def __init__(
        self,
        client: BaseReviewClient,
        reporter: Optional[ReportingSink] = None,
        policy: Optional[RetryPolicy] = None,
        engine: Optional[RetryEngine] = None,
    ):
        super().__init__(reporter=reporter, policy=policy, engine=engine)
        self.client = client
        self.change_id: Optional[int] = None
        self.snapshot: Optional[ChangeSnapshot] = None

    def describe(self) -> str:
        return f"automerge change #{self.change_id}"

    async def _step(self) -> MergeResult:
        if self.stage == Stage.OBSERVE:
            snapshot = await self.client.fetch(self.change_id)
            abort_reason = snapshot_abort_reason(snapshot)
            if abort_reason is not None:
                raise ClassifiedFailure(Abort(abort_reason))
            self.snapshot = snapshot
            self.stage = Stage.ACT

        result = await self.client.merge(self.change_id, self.snapshot.head_ref)
        if not result.applied:
            raise MergeNotAppliedError(
                f"merge of {self.snapshot.head_ref} was not applied: {result.message or 'no message'}",
                details={"change_id": self.change_id, "head_ref": self.snapshot.head_ref},
            )
        return result

    async def execute(self, change_id: int) -> Outcome:
        """
        Drive the change from Observe to a terminal Outcome.

        Never raises for classified failures: Fatal and limit exhaustion
        come back as FailedFatally.
        """
        self.change_id = change_id
        return await self._execute()

    async def run(self, change_id: int) -> Outcome:
        """
        Merge `change_id` or quietly decide not to.

        Returns:
            Success(MergeResult) or AbortedBySkip(reason)

        Raises:
            FatalWorkflowError: The merge cannot complete for a non-skippable
                reason (AutomergeLimitExceeded when limits ran out)
        """
        outcome = await self.execute(change_id)
        if isinstance(outcome, FailedFatally):
            raise outcome.error
        return outcome
