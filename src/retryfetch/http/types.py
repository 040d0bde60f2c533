"""Collaborator protocols consumed by the fetch engine.

The engine only depends on these shapes: a URL validator, a transport
provider, a sleeper and a retry strategy. Tests substitute any of them.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol, TypeVar

if TYPE_CHECKING:
    import httpx

    from retryfetch.settings import FetchSettings

T = TypeVar("T")


class UrlValidator(Protocol):
    """Turn a raw string into the normalized URL used for the request."""

    def __call__(self, raw: str) -> str:
        """Return the normalized URL or raise ``InvalidInputError``."""
        ...


class TransportProvider(Protocol):
    """Build the httpx transport that carries one fetch call."""

    def __call__(self, settings: FetchSettings) -> httpx.BaseTransport:
        """Return a fresh transport configured from ``settings``."""
        ...


class Sleeper(Protocol):
    """Block for ``seconds``; may raise to abort the retry loop."""

    def __call__(self, seconds: float) -> None: ...


class RetryStrategy(Protocol):
    """Protocol for retry strategies.

    Implementations execute a callable with retry logic according to a
    configured policy, re-raising the final error if all retries are
    exhausted.
    """

    def run(self, fn: Callable[[], T], *, target: str = "") -> T:
        """Execute fn with retries per configured policy; re-raise final error.

        Parameters
        ----------
        fn : Callable[[], T]
            The function to execute with retry logic.
        target : str, optional
            Human-readable name of what is being fetched, used in log lines.

        Returns
        -------
        T
            The result of fn if execution succeeds.
        """
        ...
