"""
Retrying workflows built on the RetryEngine.

- base.py: ClassifyingWorkflow (stage-aware Transient / Abort / Fatal mapping)
- automerge.py: Observe-then-merge pull request automerge
- install_verification.py: Single-stage npm install retry + smoke tests
"""

from pipeline_toolkit.workflows.automerge import AutomergeWorkflow, automerge_policy
from pipeline_toolkit.workflows.base import ClassifyingWorkflow
from pipeline_toolkit.workflows.classification import (
    Abort,
    Classification,
    ClassifiedFailure,
    Fatal,
    Transient,
    classify_act_failure,
    classify_failure,
    classify_observe_failure,
    is_retryable_status,
)
from pipeline_toolkit.workflows.install_verification import (
    InstallVerification,
    install_policy,
    verify_npm_package,
)
from pipeline_toolkit.workflows.outcome import AbortedBySkip, FailedFatally, Outcome, Success

__all__ = [
    "Abort",
    "AbortedBySkip",
    "AutomergeWorkflow",
    "Classification",
    "ClassifiedFailure",
    "ClassifyingWorkflow",
    "FailedFatally",
    "Fatal",
    "InstallVerification",
    "Outcome",
    "Success",
    "Transient",
    "automerge_policy",
    "classify_act_failure",
    "classify_failure",
    "classify_observe_failure",
    "install_policy",
    "is_retryable_status",
    "verify_npm_package",
]
