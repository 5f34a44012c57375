"""
Custom exceptions for the external collaborator clients.

Workflows classify failures by inspecting these exceptions: TransportError
carries the remote's HTTP status code, CommandError carries the captured
result of a failed subprocess.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from pipeline_toolkit.models.package_models import CommandResult


class ClientError(Exception):
    """
    Base exception for all client errors.

    All collaborator-specific exceptions inherit from this to allow catching
    any client failure with a single except clause.
    """
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class TransportError(ClientError):
    """
    Raised when a call to the remote review service fails.

    `status_code` is the HTTP status of the failed response, 408 for
    request timeouts, or None when no response was received at all.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, details: dict | None = None):
        super().__init__(message, details)
        self.status_code = status_code


class CommandError(ClientError):
    """
    Raised when a subprocess exits non-zero or cannot be launched.

    `result` is None for launch failures (e.g. executable not found).
    """

    def __init__(self, message: str, result: Optional["CommandResult"] = None, details: dict | None = None):
        super().__init__(message, details)
        self.result = result
