"""Shared pytest fixtures for fetch engine tests.

This module provides:
- A scripted server that replays a fixed list of outcomes over httpx.MockTransport
- A recording sleeper so backoff is asserted without sleeping
- Environment isolation for RETRYFETCH_* settings
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

import httpx
import pytest

from retryfetch.http.client import RetryingFetcher
from retryfetch.settings import FetchSettings

if TYPE_CHECKING:
    from retryfetch.http.types import Sleeper

Outcome = int | tuple[int, bytes] | type[httpx.TransportError] | Callable[[httpx.Request], httpx.Response]

_SETTINGS_ENV = (
    "RETRYFETCH_MAX_BACKOFF_S",
    "RETRYFETCH_MAX_RETRIES",
    "RETRYFETCH_TIMEOUT_S",
    "RETRYFETCH_SKIP_TLS_VERIFICATION",
)


class ScriptedServer:
    """Answer each request with the next scripted outcome.

    Outcomes are a status code, a ``(status, body)`` pair, an httpx transport
    error class (raised as if the connection failed) or a callable building a
    response. The last outcome repeats once the script runs out.
    """

    def __init__(self, *outcomes: Outcome) -> None:
        if not outcomes:
            msg = "ScriptedServer needs at least one outcome"
            raise ValueError(msg)
        self.outcomes = outcomes
        self.requests: list[httpx.Request] = []

    @property
    def attempts(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes[min(len(self.requests), len(self.outcomes)) - 1]
        if isinstance(outcome, int):
            return httpx.Response(outcome, content=b"")
        if isinstance(outcome, tuple):
            status, body = outcome
            return httpx.Response(status, content=body)
        if isinstance(outcome, type) and issubclass(outcome, httpx.TransportError):
            msg = f"scripted {outcome.__name__}"
            raise outcome(msg, request=request)
        return outcome(request)

    def transport(self, settings: FetchSettings) -> httpx.BaseTransport:
        """Transport provider handing every request to this server."""
        _ = settings
        return httpx.MockTransport(self)


@pytest.fixture(autouse=True)
def _isolate_settings_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep developer RETRYFETCH_* variables out of the tests."""
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture
def sleeps() -> list[float]:
    """Backoff delays recorded instead of slept."""
    return []


@pytest.fixture
def make_fetcher(sleeps: list[float]) -> Callable[..., RetryingFetcher]:
    """Build a fetcher wired to a scripted server and the recording sleeper."""

    def _make(
        server: ScriptedServer, *, sleep: Sleeper | None = None, **settings: object
    ) -> RetryingFetcher:
        return RetryingFetcher(
            FetchSettings(**settings),  # type: ignore[arg-type]  # test overrides
            transport=server.transport,
            sleep=sleep if sleep is not None else sleeps.append,
        )

    return _make


@pytest.fixture
def scripted() -> type[ScriptedServer]:
    """The ScriptedServer class, for tests that script their own server."""
    return ScriptedServer
