"""Failure classification and retry/backoff policy.

Every failed listing or delete call is classified into exactly one
FailureKind:

    - RETRYABLE: timeouts and transient service errors; retried with
      exponential backoff and jitter up to ``max_attempts``
    - STRUCTURAL: payload too large; never retried, the path is fanned out
    - FATAL: permission denied, malformed path, missing store, and any
      unrecognised error; never retried, never enumerated
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from typing import TypeVar

import aiohttp

from ..core.config import PruneConfig
from ..core.enums import FailureKind
from ..core.exceptions import (
    InvalidPathError,
    NotFoundError,
    PayloadTooLargeError,
    PermissionDeniedError,
    RetryCancelledError,
    RetryExhaustedError,
    StoreTimeoutError,
    TransientServiceError,
)
from .telemetry import log_job_retry

T = TypeVar("T")

_RETRYABLE: tuple[type[BaseException], ...] = (
    StoreTimeoutError,
    TransientServiceError,
    TimeoutError,
    ConnectionError,
    aiohttp.ClientConnectionError,
    aiohttp.ServerTimeoutError,
)
_FATAL: tuple[type[BaseException], ...] = (
    PermissionDeniedError,
    NotFoundError,
    InvalidPathError,
    PermissionError,
)


class RetryPolicy:
    """Decides retry vs. fail-fast vs. fan-out and computes backoff delays."""

    def __init__(
        self,
        *,
        max_attempts: int,
        backoff_base: float,
        backoff_max: float,
        jitter: float,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize retry policy.

        Args:
            max_attempts: Attempts per operation, including the first
            backoff_base: Delay before the first retry (seconds)
            backoff_max: Cap on any single delay (seconds)
            jitter: +/- fraction applied to each delay
            rng: Random source for jitter (seeded in tests)
            sleep: Awaitable sleep used by ``run``
        """
        if max_attempts <= 0:
            raise ValueError("max_attempts must be positive")
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self.jitter = jitter
        self._rng = rng or random.Random()
        self._sleep = sleep

    @classmethod
    def from_config(cls, config: PruneConfig, **kwargs) -> RetryPolicy:
        return cls(
            max_attempts=config.max_attempts,
            backoff_base=config.backoff_base,
            backoff_max=config.backoff_max,
            jitter=config.backoff_jitter,
            **kwargs,
        )

    @staticmethod
    def classify(error: BaseException) -> FailureKind:
        """Classify a failed store call."""
        # Structural first: PayloadTooLargeError is a StoreError like the others.
        if isinstance(error, PayloadTooLargeError):
            return FailureKind.STRUCTURAL
        if isinstance(error, _FATAL):
            return FailureKind.FATAL
        if isinstance(error, _RETRYABLE):
            return FailureKind.RETRYABLE
        return FailureKind.FATAL

    def can_retry(self, attempt: int) -> bool:
        """Whether another attempt is allowed after ``attempt`` attempts."""
        return attempt < self.max_attempts

    def delay_for(self, attempt: int) -> float:
        """Exponential backoff with jitter for the retry following ``attempt``.

        The undisturbed delay is ``backoff_base * 2 ** (attempt - 1)`` capped at
        ``backoff_max``; jitter scales it by a factor in [1 - jitter, 1 + jitter]
        and the result never exceeds ``backoff_max``.
        """
        exponent = max(attempt - 1, 0)
        delay = min(self.backoff_base * (2**exponent), self.backoff_max)
        factor = self._rng.uniform(1 - self.jitter, 1 + self.jitter)
        return min(max(delay * factor, 0.0), self.backoff_max)

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        path: str,
        name: str,
        on_retry: Callable[[int, float, BaseException], None] | None = None,
        stop_event: asyncio.Event | None = None,
    ) -> T:
        """Run ``operation`` until it succeeds or a non-retryable outcome occurs.

        Args:
            operation: Zero-argument coroutine factory, re-invoked per attempt
            path: Path the operation targets (for logging and errors)
            name: Operation name (for logging)
            on_retry: Called with (attempt, delay, error) before each backoff
            stop_event: When set, backoff ends early and no further attempt is made

        Returns:
            The operation's result

        Raises:
            RetryExhaustedError: If every attempt failed with a retryable error
            RetryCancelledError: If ``stop_event`` was set before the next attempt
            Exception: Structural and fatal errors propagate unchanged
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return await operation()
            except Exception as e:
                if self.classify(e) is not FailureKind.RETRYABLE:
                    raise
                if not self.can_retry(attempt):
                    raise RetryExhaustedError(
                        f"{name} {path} failed after {attempt} attempts: {e}",
                        attempts=attempt,
                        path=path,
                    ) from e
                delay = self.delay_for(attempt)
                log_job_retry(
                    path=path,
                    operation=name,
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    delay=delay,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                if on_retry is not None:
                    on_retry(attempt, delay, e)
                await self._backoff(delay, stop_event)
                if stop_event is not None and stop_event.is_set():
                    raise RetryCancelledError(
                        f"{name} {path} cancelled after {attempt} attempts",
                        attempts=attempt,
                        path=path,
                    ) from e

    async def _backoff(self, delay: float, stop_event: asyncio.Event | None) -> None:
        if stop_event is None:
            await self._sleep(delay)
            return
        sleeper = asyncio.ensure_future(self._sleep(delay))
        waiter = asyncio.ensure_future(stop_event.wait())
        try:
            done, _ = await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            sleeper.cancel()
            waiter.cancel()
        if sleeper in done:
            sleeper.result()
