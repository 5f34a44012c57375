"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests.
"""

import pytest

from pipeline_toolkit.config import Settings


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start_ms: float = 0.0):
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, delay_ms: float) -> None:
        self.now_ms += delay_ms


class RecordingSleeper:
    """Zero-delay sleeper that records requested delays.

    When given a FakeClock, each sleep advances it by the requested delay so
    elapsed-time limits behave as if the sleep really happened.
    """

    def __init__(self, clock: FakeClock | None = None):
        self.delays: list[float] = []
        self.clock = clock

    async def __call__(self, delay_ms: float) -> None:
        self.delays.append(delay_ms)
        if self.clock is not None:
            self.clock.advance(delay_ms)


class CollectingReporter:
    """Reporting sink that keeps every notice in memory."""

    def __init__(self):
        self.notices: list[str] = []

    def notice(self, message: str) -> None:
        self.notices.append(message)

    def transient_notices(self) -> list[str]:
        return [n for n in self.notices if n.startswith("transient failure")]


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.

    Override specific settings in individual tests as needed:
        def test_something(test_settings):
            test_settings.RETRY_CEILING_SECONDS = 5
    """
    return Settings(
        # === Application ===
        APP_NAME="CI Pipeline Toolkit (Test)",
        DEBUG=True,
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="test",

        # === GitHub ===
        GITHUB_API_URL="https://github.test/api",
        GITHUB_TOKEN="test-token",
        REPOSITORY_OWNER="octo",
        REPOSITORY_NAME="widgets",

        # === Retry & Backoff ===
        CAN_RETRY_AUTOMERGE=True,
        RETRY_CEILING_SECONDS=180,
        RETRY_MIN_DELAY_MS=10000,
        RETRY_MAX_DELAY_MS=30000,
        RETRY_MAX_JITTER_MS=5000,

        # === Monitoring ===
        PROMETHEUS_ENABLED=False,
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    """Deterministic millisecond clock starting at zero."""
    return FakeClock()


@pytest.fixture
def sleeper(fake_clock: FakeClock) -> RecordingSleeper:
    """Recording sleeper wired to the fake clock."""
    return RecordingSleeper(fake_clock)


@pytest.fixture
def reporter() -> CollectingReporter:
    """In-memory reporting sink."""
    return CollectingReporter()
