"""
Retry engine exceptions.

RetryAborted and RetryLimitExceeded are the two ways the engine gives up
without the operation's own error escaping: the first when the failure
hook explicitly asked to stop, the second when a policy limit ran out and
the policy kept the default limit behavior.
"""

from pipeline_toolkit.retry.policy import LimitReason


class RetryError(Exception):
    """
    Base exception for retry engine outcomes.

    Attributes:
        last_error: Exception raised by the final attempt
        attempt_number: Number of attempts made
        total_elapsed_ms: Time from the first attempt to the final failure
    """

    def __init__(self, message: str, last_error: Exception, attempt_number: int, total_elapsed_ms: float):
        super().__init__(message)
        self.last_error = last_error
        self.attempt_number = attempt_number
        self.total_elapsed_ms = total_elapsed_ms


class RetryAborted(RetryError):
    """Raised when the failure hook returned False."""

    def __init__(self, last_error: Exception, attempt_number: int, total_elapsed_ms: float):
        super().__init__("attempted execution was aborted", last_error, attempt_number, total_elapsed_ms)


class RetryLimitExceeded(RetryError):
    """Raised by the default limit hook when attempts or elapsed time run out."""

    def __init__(
        self,
        last_error: Exception,
        attempt_number: int,
        reason: LimitReason,
        total_elapsed_ms: float,
    ):
        what = "elapsed runtime" if reason == LimitReason.ELAPSED else "attempts"
        super().__init__(
            f"maximum {what} exceeded while retrying function",
            last_error,
            attempt_number,
            total_elapsed_ms,
        )
        self.reason = reason
