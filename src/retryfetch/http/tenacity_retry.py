"""Tenacity-based retry strategy implementation.

This module provides TenacityRetryStrategy, which retries transient HTTP
failures with a deterministic doubling backoff. The backoff starts at a 50 ms
floor, doubles after every failed attempt and is clamped to a ceiling; the
sleep also follows the final failed attempt before the error is re-raised.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final, TypeVar

from tenacity import Retrying, retry_if_exception_type, stop_after_attempt
from tenacity.wait import wait_base

from retryfetch.http.errors import HttpError, HttpStatusError
from retryfetch.http.types import RetryStrategy, Sleeper
from retryfetch.logging import get_logger

if TYPE_CHECKING:
    from tenacity import RetryCallState

T = TypeVar("T")

BACKOFF_FLOOR_S: Final[float] = 0.05

# Cap on the doubling exponent.
_MAX_DOUBLINGS: Final[int] = 64


@dataclass(frozen=True)
class DoublingBackoff(wait_base):
    """Wait strategy that doubles from a floor and clamps to a ceiling.

    After ``n`` failed attempts the delay is ``min(floor_s * 2**n, max_s)``,
    so with the defaults the sequence is 0.1, 0.2, 0.4, 0.8, 1.6, 3.2, 5, 5, ...

    Attributes
    ----------
    max_s : float
        Maximum wait time in seconds.
    floor_s : float
        Starting value, doubled before the first sleep.
    """

    max_s: float
    floor_s: float = BACKOFF_FLOOR_S

    def delay_for(self, failures: int) -> float:
        """Return the sleep that follows the ``failures``-th failed attempt.

        Parameters
        ----------
        failures : int
            Number of failed attempts so far (1-based).

        Returns
        -------
        float
            Delay in seconds, never negative. The exponent stops growing
            after ``_MAX_DOUBLINGS`` so long runs cannot overflow.
        """
        doublings = min(max(failures, 0), _MAX_DOUBLINGS)
        return max(0.0, min(self.floor_s * 2.0**doublings, self.max_s))

    def __call__(self, retry_state: RetryCallState) -> float:
        """Calculate wait time for retry.

        Parameters
        ----------
        retry_state : RetryCallState
            Tenacity retry state object.

        Returns
        -------
        float
            Wait time in seconds.
        """
        return self.delay_for(retry_state.attempt_number)


def backoff_sequence(max_backoff_s: float, count: int) -> list[float]:
    """Return the first ``count`` backoff delays for a ceiling.

    >>> backoff_sequence(5.0, 8)
    [0.1, 0.2, 0.4, 0.8, 1.6, 3.2, 5.0, 5.0]
    """
    backoff = DoublingBackoff(max_s=max_backoff_s)
    return [backoff.delay_for(n) for n in range(1, count + 1)]


@dataclass(frozen=True)
class RetryPolicy:
    """Retry budget and backoff ceiling for one fetcher.

    Attributes
    ----------
    max_retries : int
        Maximum number of attempts.
    max_backoff_s : float
        Ceiling for the backoff delay in seconds.
    """

    max_retries: int
    max_backoff_s: float


class TenacityRetryStrategy(RetryStrategy):
    """Retry strategy implementation using tenacity library.

    Only :class:`~retryfetch.http.errors.HttpError` is retried; any other
    exception raised by the attempt propagates at once.

    Parameters
    ----------
    policy : RetryPolicy
        Retry policy configuration.
    sleep : Sleeper, optional
        Blocking sleep used between attempts. Defaults to ``time.sleep``.
    logger : logging.Logger | logging.LoggerAdapter | None, optional
        Sink for attempt and backoff log lines.
    """

    def __init__(
        self,
        policy: RetryPolicy,
        *,
        sleep: Sleeper = time.sleep,
        logger: logging.Logger | logging.LoggerAdapter | None = None,  # type: ignore[type-arg]
    ) -> None:
        self.policy = policy
        self.backoff = DoublingBackoff(max_s=policy.max_backoff_s)
        self._sleep = sleep
        self._logger = logger or get_logger(__name__)

    def run(self, fn: Callable[[], T], *, target: str = "") -> T:
        """Execute function with retry logic.

        Parameters
        ----------
        fn : Callable[[], T]
            Function to execute with retries.
        target : str, optional
            Name of what is being fetched, used in log lines.

        Returns
        -------
        T
            Result of function execution.

        Notes
        -----
        The last :class:`HttpError` is re-raised once ``max_retries`` attempts
        have failed and the trailing backoff has elapsed. A non-positive
        budget is the caller's to handle; tenacity always makes one attempt.
        """
        return self._build_retrying(target)(fn)

    def _build_retrying(self, target: str) -> Retrying:
        """Create a configured Tenacity Retrying instance.

        Parameters
        ----------
        target : str
            Name of what is being fetched, used in log lines.

        Returns
        -------
        Retrying
            Retrying instance with retry predicate, stop condition, wait
            strategy and logging hooks from the policy.
        """
        log = self._logger

        def _before(retry_state: RetryCallState) -> None:
            log.info(
                "Fetching data from %s. Attempt #%d",
                target,
                retry_state.attempt_number,
                extra={
                    "operation": "fetch",
                    "status": "started",
                    "url": target,
                    "attempt": retry_state.attempt_number,
                },
            )

        def _after(retry_state: RetryCallState) -> None:
            exc = retry_state.outcome.exception() if retry_state.outcome else None
            if isinstance(exc, HttpStatusError):
                log.warning(
                    "Server error. HTTP status code: %d",
                    exc.status,
                    extra={"operation": "fetch", "url": target, "status_code": exc.status},
                )
            else:
                log.warning(
                    "Unable to fetch data: %s",
                    exc,
                    extra={"operation": "fetch", "url": target, "error_type": type(exc).__name__},
                )

        def _before_sleep(retry_state: RetryCallState) -> None:
            self._log_sleep(target, self.backoff(retry_state))

        def _exhausted(retry_state: RetryCallState) -> object:
            delay = self.backoff(retry_state)
            self._log_sleep(target, delay)
            self._sleep(delay)
            # re-raises the last HttpError
            return retry_state.outcome.result() if retry_state.outcome else None

        return Retrying(
            retry=retry_if_exception_type(HttpError),
            stop=stop_after_attempt(self.policy.max_retries),
            wait=self.backoff,
            sleep=self._sleep,
            before=_before,
            after=_after,
            before_sleep=_before_sleep,
            retry_error_callback=_exhausted,
        )

    def _log_sleep(self, target: str, delay: float) -> None:
        self._logger.info(
            "Sleeping for %.3fs...",
            delay,
            extra={"operation": "fetch", "status": "backoff", "url": target, "sleep_s": delay},
        )
