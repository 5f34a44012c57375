"""
Models for package installation and subprocess execution.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CommandResult(BaseModel):
    """Captured result of a finished subprocess."""
    model_config = ConfigDict(frozen=True)

    exit_code: int = Field(..., description="Process exit code")
    stdout: str = Field(default="", description="Decoded standard output")
    stderr: str = Field(default="", description="Decoded standard error")


class PackageMetadata(BaseModel):
    """
    Release metadata collected earlier in the pipeline.

    Drives whether install verification runs and which smoke tests apply.
    """

    package_name: str = Field(..., min_length=1)
    package_version: str = Field(..., min_length=1)
    should_skip_ci: bool = Field(default=False, description="Commit asked to skip CI")
    should_skip_cd: bool = Field(default=False, description="Commit asked to skip CD")
    has_private: bool = Field(default=False, description="package.json is marked private")
    has_bin: bool = Field(default=False, description="Package ships a CLI entry point")
    retry_ceiling_seconds: Optional[int] = Field(
        default=None,
        ge=0,
        description="Elapsed-time ceiling override for install retries",
    )

    @property
    def spec(self) -> str:
        """npm install specifier, e.g. `pkg@1.2.3`."""
        return f"{self.package_name}@{self.package_version}"
