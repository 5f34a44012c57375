"""
Component action and workflow exceptions.

ComponentActionError is the error every pipeline component action raises
when it cannot complete; the workflow errors below specialize it for the
retrying workflows so callers can decide whether a failed step should fail
the overall pipeline run.
"""


class ComponentActionError(Exception):
    """Base exception for all component action failures."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FatalWorkflowError(ComponentActionError):
    """
    Raised when a retrying workflow fails for a non-skippable reason.

    Covers explicit Fatal classifications (unclassified transport errors,
    rejected merges) and limit exhaustion. The underlying exception, if any,
    is kept on `cause`.
    """

    def __init__(self, message: str, cause: BaseException | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.cause = cause


class WorkflowLimitExceeded(FatalWorkflowError):
    """Raised when a workflow runs out of attempts or elapsed time."""
    pass


class AutomergeLimitExceeded(WorkflowLimitExceeded):
    """Raised when automerge runs out of attempts or elapsed time."""
    pass


class MergeNotAppliedError(ComponentActionError):
    """
    Raised when the merge call succeeded but the merge was not applied.

    The remote accepted the request yet reported that nothing was merged.
    Always classified as Fatal.
    """
    pass
