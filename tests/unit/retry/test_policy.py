"""
Unit tests for RetryPolicy.
"""

import dataclasses
import math

import pytest

from pipeline_toolkit.retry.policy import UNBOUNDED, RetryPolicy


def test_defaults():
    """Test the zero-config policy values."""
    policy = RetryPolicy()

    assert policy.max_attempts == 10
    assert policy.max_total_elapsed_ms == UNBOUNDED
    assert policy.min_delay_ms == 100
    assert policy.max_delay_ms == UNBOUNDED
    assert policy.max_jitter_ms == 0
    assert policy.on_limit_reached is True
    assert policy.on_failure(Exception(), 1, 100, 0) is True


@pytest.mark.parametrize("max_attempts", [0, UNBOUNDED])
def test_zero_and_unbounded_attempt_limits_are_equivalent(max_attempts):
    """Test the zero sentinel maps to an infinite attempt limit."""
    assert RetryPolicy(max_attempts=max_attempts).attempt_limit == math.inf


def test_finite_attempt_limit_kept():
    assert RetryPolicy(max_attempts=3).attempt_limit == 3


@pytest.mark.parametrize("n", range(1, 12))
def test_base_delay_doubles_without_cap(n):
    """Test base delay is exactly 2^(n-1) * min_delay_ms."""
    assert RetryPolicy(min_delay_ms=250).base_delay_ms(n) == 2 ** (n - 1) * 250


def test_base_delay_capped():
    policy = RetryPolicy(min_delay_ms=10000, max_delay_ms=30000)

    assert [policy.base_delay_ms(n) for n in range(1, 5)] == [10000, 20000, 30000, 30000]


@pytest.mark.parametrize(
    "field", ["max_attempts", "max_total_elapsed_ms", "min_delay_ms", "max_delay_ms", "max_jitter_ms"]
)
def test_negative_limits_rejected(field):
    """Test negative values fail validation."""
    with pytest.raises(ValueError, match=field):
        RetryPolicy(**{field: -1})


def test_policy_is_immutable():
    policy = RetryPolicy()

    with pytest.raises(dataclasses.FrozenInstanceError):
        policy.max_attempts = 3
