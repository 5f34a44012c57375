"""
Data models exchanged with the remote change-review service.

These are the only shapes the automerge workflow reads; provider-specific
payloads are translated into them by the client layer.
"""

from pydantic import BaseModel, ConfigDict, Field

from pipeline_toolkit.models.enums import ChangeState


class ChangeSnapshot(BaseModel):
    """Current state of a reviewable change (pull request)."""
    model_config = ConfigDict(frozen=True)

    state: ChangeState = Field(..., description="Lifecycle state reported by the remote")
    head_ref: str = Field(..., min_length=1, description="Head commit SHA used for the merge")
    merged: bool = Field(default=False, description="Whether the change is already merged")
    draft: bool = Field(default=False, description="Whether the change is marked as draft")


class MergeResult(BaseModel):
    """Response to a merge request that did not fail at the transport level."""
    model_config = ConfigDict(frozen=True)

    applied: bool = Field(..., description="Whether the merge actually happened")
    message: str = Field(default="", description="Human-readable message from the remote")
