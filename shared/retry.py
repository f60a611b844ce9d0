"""
Retry-with-backoff helpers for flaky UI interactions.

Public demo sites are slow and occasionally drop requests, so a handful
of steps (logging in, opening a menu) are wrapped in a bounded retry
loop.  The executor never inspects the error it catches: every
``Exception`` is retryable, and once the attempts are spent the last
exception is re-raised exactly as the operation raised it.  Callers that
only want to retry some failures must filter them before handing the
operation over.

Delays are real wall-clock sleeps, so tests using these helpers need a
timeout budget that covers ``sum(policy.delays())``.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

ErrorHandler = Callable[[Exception, int], None]


@dataclass(frozen=True)
class RetryPolicy:
    """
    How many times to run an operation and how long to wait in between.

    Attributes:
        max_attempts: Total number of invocations allowed.  ``0`` and ``1``
            both mean a single attempt with no retries.
        initial_delay: Seconds to wait after the first failure.
        backoff_multiplier: Factor applied to the delay after every failed
            attempt.  ``1`` gives a constant delay.
    """

    max_attempts: int = 3
    initial_delay: float = 1.0
    backoff_multiplier: float = 2.0

    def __post_init__(self) -> None:
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int):
            raise ValueError(f"max_attempts must be an integer, got {self.max_attempts!r}")
        if self.max_attempts < 0:
            raise ValueError(f"max_attempts must be >= 0, got {self.max_attempts}")
        if self.initial_delay < 0:
            raise ValueError(f"initial_delay must be >= 0, got {self.initial_delay}")
        if self.backoff_multiplier < 1:
            raise ValueError(
                f"backoff_multiplier must be >= 1, got {self.backoff_multiplier}"
            )

    @property
    def attempts(self) -> int:
        """Number of times the operation will actually be invoked at most."""
        return max(1, self.max_attempts)

    def delays(self) -> list[float]:
        """
        Return the sleep scheduled after each failed attempt but the last.

        The delay between attempt ``i`` and ``i + 1`` (zero-based) is
        ``initial_delay * backoff_multiplier ** i``.
        """
        return [
            self.initial_delay * self.backoff_multiplier**index
            for index in range(self.attempts - 1)
        ]


DEFAULT_RETRY_POLICY = RetryPolicy()


def retry_call(
    operation: Callable[[], T],
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    *,
    on_error: ErrorHandler | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Invoke ``operation`` until it succeeds or the policy runs out of attempts.

    Args:
        operation: Zero-argument callable to run.
        policy: Attempt count and backoff schedule.
        on_error: Optional callback receiving ``(exception, attempt)`` after
            every failed attempt, including the last one.
        sleep: Function used to wait between attempts.

    Returns:
        Whatever the first successful invocation returned.

    Raises:
        Exception: The exception from the final attempt, unchanged.
    """
    delay = policy.initial_delay
    for attempt in range(1, policy.attempts + 1):
        try:
            return operation()
        except Exception as exc:
            if on_error is not None:
                on_error(exc, attempt)
            if attempt >= policy.attempts:
                raise
            logger.warning(
                "Attempt %s/%s failed: %s", attempt, policy.attempts, exc
            )
            logger.debug("Retrying in %.3fs", delay)
            sleep(delay)
            delay *= policy.backoff_multiplier
    raise AssertionError("unreachable")  # pragma: no cover


async def retry_call_async(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    *,
    on_error: ErrorHandler | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Coroutine counterpart of :func:`retry_call` for async Playwright code."""
    delay = policy.initial_delay
    for attempt in range(1, policy.attempts + 1):
        try:
            return await operation()
        except Exception as exc:
            if on_error is not None:
                on_error(exc, attempt)
            if attempt >= policy.attempts:
                raise
            logger.warning(
                "Attempt %s/%s failed: %s", attempt, policy.attempts, exc
            )
            logger.debug("Retrying in %.3fs", delay)
            await sleep(delay)
            delay *= policy.backoff_multiplier
    raise AssertionError("unreachable")  # pragma: no cover


def retrying(policy: RetryPolicy = DEFAULT_RETRY_POLICY):
    """
    Decorator form of :func:`retry_call`.

    Example::

        @retrying(RetryPolicy(max_attempts=3, initial_delay=0.5))
        def open_menu(page):
            ...
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            return retry_call(lambda: func(*args, **kwargs), policy)

        return wrapper

    return decorator
