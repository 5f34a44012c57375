"""
Unit tests for component action errors.
"""

import pytest

from pipeline_toolkit import errors
from pipeline_toolkit.errors import (
    AutomergeLimitExceeded,
    ComponentActionError,
    FatalWorkflowError,
    MergeNotAppliedError,
    WorkflowLimitExceeded,
)


@pytest.mark.parametrize(
    "error_class",
    [FatalWorkflowError, WorkflowLimitExceeded, AutomergeLimitExceeded, MergeNotAppliedError],
)
def test_every_error_is_a_component_action_error(error_class):
    assert issubclass(error_class, ComponentActionError)


def test_limit_errors_are_fatal():
    error = AutomergeLimitExceeded("out of time", cause=TimeoutError("slow"), details={"attempt_number": 4})

    assert isinstance(error, WorkflowLimitExceeded)
    assert isinstance(error, FatalWorkflowError)
    assert isinstance(error.cause, TimeoutError)
    assert error.details == {"attempt_number": 4}
    assert str(error) == "out of time"


def test_details_default_to_empty_dict():
    assert ComponentActionError("boom").details == {}


def test_only_raised_errors_are_exported():
    """Test the module exposes no exception classes the workflows never raise."""
    exported = {
        name for name, value in vars(errors).items()
        if isinstance(value, type) and issubclass(value, Exception)
    }

    assert exported == {
        "ComponentActionError",
        "FatalWorkflowError",
        "WorkflowLimitExceeded",
        "AutomergeLimitExceeded",
        "MergeNotAppliedError",
    }
