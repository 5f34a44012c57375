"""Data models for the pipeline toolkit."""

from pipeline_toolkit.models.enums import ChangeState, Stage
from pipeline_toolkit.models.package_models import CommandResult, PackageMetadata
from pipeline_toolkit.models.review_models import ChangeSnapshot, MergeResult

__all__ = [
    "ChangeSnapshot",
    "ChangeState",
    "CommandResult",
    "MergeResult",
    "PackageMetadata",
    "Stage",
]
