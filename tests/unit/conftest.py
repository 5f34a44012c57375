"""Unit test fixtures (fakes and stubs).

Provides collaborator doubles for testing without external dependencies.
"""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from pipeline_toolkit.clients.base_client import BaseReviewClient
from pipeline_toolkit.clients.subprocess_runner import SubprocessRunner
from pipeline_toolkit.models.enums import ChangeState
from pipeline_toolkit.models.package_models import CommandResult
from pipeline_toolkit.models.review_models import ChangeSnapshot, MergeResult
from pipeline_toolkit.retry.engine import RetryEngine


class FakeReviewClient(BaseReviewClient):
    """Review client replaying scripted fetch/merge results.

    Each scripted item is either a value to return or an exception to raise.
    The last item repeats once the script runs out.
    """

    def __init__(self, fetch_script: list[Any], merge_script: list[Any] | None = None):
        super().__init__("https://review.test")
        self.fetch_script = list(fetch_script)
        self.merge_script = list(merge_script or [])
        self.fetch_calls: list[int] = []
        self.merge_calls: list[tuple[int, str]] = []

    @staticmethod
    def _next(script: list[Any]) -> Any:
        item = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(item, Exception):
            raise item
        return item

    async def fetch(self, change_id: int) -> ChangeSnapshot:
        self.fetch_calls.append(change_id)
        return self._next(self.fetch_script)

    async def merge(self, change_id: int, head_ref: str) -> MergeResult:
        self.merge_calls.append((change_id, head_ref))
        return self._next(self.merge_script)


def make_snapshot(**overrides) -> ChangeSnapshot:
    """Open, non-draft, unmerged change unless overridden."""
    data = {"state": ChangeState.OPEN, "head_ref": "abc123", "merged": False, "draft": False}
    data.update(overrides)
    return ChangeSnapshot(**data)


@pytest.fixture
def open_snapshot() -> ChangeSnapshot:
    """Mergeable change snapshot."""
    return make_snapshot()


@pytest.fixture
def merged_result() -> MergeResult:
    """Successful merge response."""
    return MergeResult(applied=True, message="Pull Request successfully merged")


@pytest.fixture
def engine(sleeper) -> RetryEngine:
    """RetryEngine with zero jitter, recording sleeper and fake clock."""
    return RetryEngine(sleeper=sleeper, random_fn=lambda low, high: 0, clock=sleeper.clock)


@pytest.fixture
def mock_runner() -> AsyncMock:
    """SubprocessRunner double that succeeds by default."""
    runner = AsyncMock(spec=SubprocessRunner)
    runner.run = AsyncMock(return_value=CommandResult(exit_code=0, stdout="", stderr=""))
    return runner


@pytest.fixture
def review_client_factory():
    """Factory fixture building FakeReviewClient instances.

    Usage:
        def test_something(review_client_factory, open_snapshot):
            client = review_client_factory([open_snapshot], [MergeResult(applied=True)])
    """
    return FakeReviewClient


@pytest.fixture
def snapshot_factory():
    """Factory fixture building ChangeSnapshot instances (see make_snapshot)."""
    return make_snapshot
