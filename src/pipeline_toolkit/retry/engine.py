"""
Retry engine with exponential backoff, jitter and dual limits.

This module implements the RetryEngine that repeatedly executes a fallible
operation according to a RetryPolicy. It knows nothing about what the
operation does: classification of failures belongs to the policy hooks.

Backoff:
    base delay after attempt n = min(max_delay_ms, 2^(n-1) * min_delay_ms)
    next delay = base delay + uniform(0, max_jitter_ms)

Limits (checked in this order after every failure):
    1. Elapsed time since the first attempt > max_total_elapsed_ms
    2. attempt_number >= max_attempts (0 = unbounded)

Usage:
    result = await attempt(fetch_something, RetryPolicy(max_attempts=3))
"""

import asyncio
import inspect
import random
import time
from typing import Any, Awaitable, Callable, Optional

from pipeline_toolkit.config import Settings, settings as app_settings
from pipeline_toolkit.retry.exceptions import RetryAborted, RetryLimitExceeded
from pipeline_toolkit.retry.policy import Attempt, LimitReason, RetryPolicy

Sleeper = Callable[[float], Awaitable[None]]
"""Non-blocking sleep taking milliseconds."""


async def real_sleep(delay_ms: float) -> None:
    """Sleep for `delay_ms` milliseconds. Interruptible by task cancellation."""
    await asyncio.sleep(delay_ms / 1000)


async def instant_sleep(delay_ms: float) -> None:
    """Zero-delay sleep for test environments."""
    return None


def default_sleeper(settings: Optional[Settings] = None) -> Sleeper:
    """Pick the sleep primitive for the current environment."""
    settings = settings or app_settings
    if settings.ENVIRONMENT.lower() == "test":
        return instant_sleep
    return real_sleep


async def _resolve(value: Any) -> Any:
    """Await `value` if the callee handed back an awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class RetryEngine:
    """
    Executes an operation repeatedly according to a RetryPolicy.

    Attempts run strictly one after another; hooks complete before the next
    attempt starts. The engine does not log or persist anything itself.

    Attributes:
        sleeper: Sleep primitive used between attempts (milliseconds)
        random_fn: Jitter source, called as random_fn(0, max_jitter_ms)
        clock: Millisecond clock used for elapsed-time accounting
    """

    def __init__(
        self,
        sleeper: Optional[Sleeper] = None,
        random_fn: Callable[[float, float], float] = random.uniform,
        clock: Callable[[], float] = _monotonic_ms,
    ):
        self.sleeper = sleeper or default_sleeper()
        self.random_fn = random_fn
        self.clock = clock

    def next_delay_ms(self, policy: RetryPolicy, attempt_number: int) -> float:
        """Base delay for `attempt_number` plus a freshly drawn jitter."""
        jitter_ms = self.random_fn(0, policy.max_jitter_ms) if policy.max_jitter_ms > 0 else 0
        return policy.base_delay_ms(attempt_number) + jitter_ms

    async def attempt(
        self,
        operation: Callable[[], Any],
        policy: Optional[RetryPolicy] = None,
        history: Optional[list[Attempt]] = None,
    ) -> Any:
        """
        Execute `operation` until it succeeds or the policy gives up.

        Args:
            operation: Zero-argument callable, sync or async
            policy: Retry policy (defaults to RetryPolicy())
            history: Caller-owned list that receives one Attempt per iteration

        Returns:
            The operation's result, or None when a limit was reached and the
            policy's on_limit_reached hook returned normally

        Raises:
            RetryAborted: on_failure returned False
            RetryLimitExceeded: A limit was reached with on_limit_reached=True
            Exception: Whatever on_failure or on_limit_reached raised
        """
        policy = policy or RetryPolicy()
        attempts: list[Attempt] = history if history is not None else []
        first_attempt_ms = self.clock()
        attempt_number = 0

        while True:
            attempt_number += 1
            started_at = self.clock()

            try:
                result = await _resolve(operation())
            except Exception as e:
                total_elapsed_ms = self.clock() - first_attempt_ms

                if total_elapsed_ms > policy.max_total_elapsed_ms:
                    attempts.append(Attempt(attempt_number, started_at, e))
                    return await self._limit_reached(policy, e, attempt_number, LimitReason.ELAPSED, total_elapsed_ms)

                if attempt_number >= policy.attempt_limit:
                    attempts.append(Attempt(attempt_number, started_at, e))
                    return await self._limit_reached(policy, e, attempt_number, LimitReason.ATTEMPTS, total_elapsed_ms)

                next_delay_ms = self.next_delay_ms(policy, attempt_number)
                attempts.append(Attempt(attempt_number, started_at, e, next_delay_ms))

                if not await _resolve(policy.on_failure(e, attempt_number, next_delay_ms, total_elapsed_ms)):
                    raise RetryAborted(e, attempt_number, total_elapsed_ms) from e

                await self.sleeper(next_delay_ms)
                continue

            attempts.append(Attempt(attempt_number, started_at))
            return result

    async def _limit_reached(
        self,
        policy: RetryPolicy,
        error: Exception,
        attempt_number: int,
        reason: LimitReason,
        total_elapsed_ms: float,
    ) -> None:
        hook = policy.on_limit_reached
        if hook is True:
            raise RetryLimitExceeded(error, attempt_number, reason, total_elapsed_ms) from error
        if hook is False:
            return None
        await _resolve(hook(error, attempt_number, reason, total_elapsed_ms))
        return None


async def attempt(
    operation: Callable[[], Any],
    policy: Optional[RetryPolicy] = None,
    *,
    sleeper: Optional[Sleeper] = None,
) -> Any:
    """Run `operation` under `policy` with a fresh RetryEngine."""
    return await RetryEngine(sleeper=sleeper).attempt(operation, policy)
