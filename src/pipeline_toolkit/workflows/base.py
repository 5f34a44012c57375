"""
Classifying workflow: a staged operation driven through the RetryEngine.

The workflow's attempt body is the operation handed to the engine. The
engine owns timing and attempt counting; the workflow owns the meaning of
each failure, which it maps onto the engine's hooks:

    Transient -> on_failure returns True   (notice + another attempt)
    Abort     -> on_failure returns False  (notice, AbortedBySkip outcome)
    Fatal     -> on_failure raises         (FailedFatally outcome)

Limit exhaustion is reported through on_limit_reached and ends as a fatal
outcome carrying elapsed time and attempt count.
"""

import dataclasses
from abc import ABC, abstractmethod
from typing import Any, Optional
import structlog

from pipeline_toolkit.errors import FatalWorkflowError, WorkflowLimitExceeded
from pipeline_toolkit.models.enums import Stage
from pipeline_toolkit.monitoring.metrics import (
    retry_attempts_total,
    retry_delay_seconds,
    workflow_outcomes_total,
)
from pipeline_toolkit.monitoring.reporting import ReportingSink, StructlogReporter
from pipeline_toolkit.retry.engine import RetryEngine
from pipeline_toolkit.retry.exceptions import RetryAborted
from pipeline_toolkit.retry.policy import LimitReason, RetryPolicy
from pipeline_toolkit.workflows.classification import (
    Abort,
    Classification,
    Fatal,
    Transient,
    classify_failure,
)
from pipeline_toolkit.workflows.outcome import AbortedBySkip, FailedFatally, Outcome, Success

logger = structlog.get_logger(__name__)


def ms_to_seconds(ms: float) -> int:
    """Whole seconds for progress notices."""
    return int(ms // 1000)


class ClassifyingWorkflow(ABC):
    """
    Base class for single-use, stage-aware retrying workflows.

    Subclasses implement `_step` (one attempt) and `describe` (the phrase
    used in notices). The `stage` field starts at OBSERVE; subclasses move
    it forward and never back.

    Attributes:
        reporter: Sink for human-readable progress notices
        policy: Retry limits and delays (hooks are replaced by the workflow)
        engine: RetryEngine driving the attempts
        stage: Current stage of the state machine
        abort_reason: Reason recorded when the run was aborted
        transient_failures: Number of transient failures absorbed
    """

    workflow_name = "workflow"
    limit_error_class: type[WorkflowLimitExceeded] = WorkflowLimitExceeded

    def __init__(
        self,
        reporter: Optional[ReportingSink] = None,
        policy: Optional[RetryPolicy] = None,
        engine: Optional[RetryEngine] = None,
    ):
        self.reporter = reporter or StructlogReporter(workflow=self.workflow_name)
        self.policy = policy or RetryPolicy()
        self.engine = engine or RetryEngine()
        self.stage = Stage.OBSERVE
        self.abort_reason: Optional[str] = None
        self.transient_failures = 0
        self._started = False

    @abstractmethod
    async def _step(self) -> Any:
        """Run one attempt. Raise to signal failure."""

    @abstractmethod
    def describe(self) -> str:
        """Short description of the target, e.g. `automerge change #42`."""

    def classify(self, error: Exception) -> Classification:
        """Classify `error` according to the current stage."""
        return classify_failure(self.stage, error)

    async def _execute(self) -> Outcome:
        if self._started:
            raise RuntimeError(f"{type(self).__name__} instances are single-use")
        self._started = True

        policy = dataclasses.replace(
            self.policy,
            on_failure=self._on_failure,
            on_limit_reached=self._on_limit_reached,
        )

        logger.info(
            "Starting workflow",
            workflow=self.workflow_name,
            target=self.describe(),
            max_attempts=policy.attempt_limit,
            max_total_elapsed_ms=policy.max_total_elapsed_ms,
        )

        try:
            result = await self.engine.attempt(self._step, policy)
        except RetryAborted:
            return self._aborted()
        except FatalWorkflowError as e:
            self.reporter.notice(str(e))
            outcome = "limit_exceeded" if isinstance(e, self.limit_error_class) else "fatal"
            workflow_outcomes_total.labels(workflow=self.workflow_name, outcome=outcome).inc()
            logger.error(
                "Workflow failed",
                workflow=self.workflow_name,
                target=self.describe(),
                stage=self.stage.value,
                error=str(e),
            )
            return FailedFatally(e)

        # An abort classified on the final permitted attempt resolves through
        # on_limit_reached rather than RetryAborted.
        if self.abort_reason is not None:
            return self._aborted()

        workflow_outcomes_total.labels(workflow=self.workflow_name, outcome="success").inc()
        logger.info(
            "Workflow succeeded",
            workflow=self.workflow_name,
            target=self.describe(),
            transient_failures=self.transient_failures,
        )
        return Success(result)

    def _aborted(self) -> AbortedBySkip:
        reason = self.abort_reason or "aborted"
        self.reporter.notice(f"{self.describe()} skipped: {reason}")
        workflow_outcomes_total.labels(workflow=self.workflow_name, outcome="aborted").inc()
        logger.info("Workflow aborted", workflow=self.workflow_name, target=self.describe(), reason=reason)
        return AbortedBySkip(reason)

    def _record(self, classification: Classification) -> None:
        kind = type(classification).__name__.lower()
        retry_attempts_total.labels(workflow=self.workflow_name, classification=kind).inc()

    def _fatal(self, classification: Fatal, attempt_number: int, total_elapsed_ms: float) -> FatalWorkflowError:
        return FatalWorkflowError(
            f"fatal error at {ms_to_seconds(total_elapsed_ms)}s: {self.describe()} failed "
            f"on attempt #{attempt_number} during {self.stage.value}: {classification.reason}",
            cause=classification.error,
            details={"attempt_number": attempt_number, "total_elapsed_ms": total_elapsed_ms},
        )

    def _on_failure(
        self,
        error: Exception,
        attempt_number: int,
        next_delay_ms: float,
        total_elapsed_ms: float,
    ) -> bool:
        classification = self.classify(error)
        self._record(classification)

        if isinstance(classification, Transient):
            self.transient_failures += 1
            retry_delay_seconds.labels(workflow=self.workflow_name).observe(next_delay_ms / 1000)
            self.reporter.notice(
                f"transient failure at {ms_to_seconds(total_elapsed_ms)}s: attempt #{attempt_number} "
                f"to {self.describe()} did not succeed: {error}\n---\n"
                f"next attempt in {ms_to_seconds(next_delay_ms)} seconds..."
            )
            return True

        if isinstance(classification, Abort):
            self.abort_reason = classification.reason
            return False

        raise self._fatal(classification, attempt_number, total_elapsed_ms) from error

    def _on_limit_reached(
        self,
        error: Exception,
        attempt_number: int,
        reason: LimitReason,
        total_elapsed_ms: float,
    ) -> None:
        classification = self.classify(error)
        self._record(classification)

        if isinstance(classification, Abort):
            self.abort_reason = classification.reason
            return None

        if isinstance(classification, Fatal):
            raise self._fatal(classification, attempt_number, total_elapsed_ms) from error

        raise self.limit_error_class(
            f"fatal error at {ms_to_seconds(total_elapsed_ms)}s: unable to {self.describe()} "
            f"after {attempt_number} tries ({reason.value} limit reached): {error}",
            cause=error,
            details={
                "attempt_number": attempt_number,
                "total_elapsed_ms": total_elapsed_ms,
                "reason": reason.value,
            },
        ) from error
