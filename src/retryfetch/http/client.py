"""Retrying HTTP fetch client.

This module provides RetryingFetcher, which issues a GET request, classifies
the response by its status class and retries transient failures with a
doubling backoff until it succeeds, hits a client error or runs out of
attempts.

Examples
--------
>>> from retryfetch.http.client import RetryingFetcher
>>> from retryfetch.settings import FetchSettings
>>> fetcher = RetryingFetcher(FetchSettings(max_retries=3))
>>> body = fetcher.get("https://example.com/")  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Final

import httpx

from retryfetch.errors import (
    FetchCancelledError,
    FetchError,
    FetchTimeoutError,
    NotFoundError,
)
from retryfetch.http.errors import (
    HttpError,
    HttpStatusError,
    HttpTimeoutError,
    translate_transport_error,
)
from retryfetch.http.tenacity_retry import RetryPolicy, TenacityRetryStrategy
from retryfetch.http.transport import default_transport, request_timeout
from retryfetch.http.validation import validate_url
from retryfetch.logging import get_logger
from retryfetch.settings import FetchSettings

if TYPE_CHECKING:
    from retryfetch.http.types import Sleeper, TransportProvider, UrlValidator

__all__ = ["HTTP_2XX", "HTTP_4XX", "RetryingFetcher"]

HTTP_2XX: Final[int] = 2
HTTP_4XX: Final[int] = 4


class RetryingFetcher:
    """GET client that retries transient failures with exponential backoff.

    Transport errors and 1xx/3xx/5xx responses are retried; redirects are not
    followed. A 4xx response stops the loop with :class:`NotFoundError`. When
    ``max_retries`` attempts have failed, :class:`FetchTimeoutError` is raised
    with the last transient failure as its cause.

    The fetcher keeps no per-call state: each :meth:`get` builds and closes
    its own httpx client, so one instance may serve several threads.

    Parameters
    ----------
    settings : FetchSettings | None, optional
        Timeouts, retry budget and TLS mode. Defaults to ``FetchSettings()``.
    validator : UrlValidator, optional
        Turns the raw URL into the one requested. Defaults to
        :func:`~retryfetch.http.validation.validate_url`.
    transport : TransportProvider | None, optional
        Builds the httpx transport for each call. Defaults to
        :func:`~retryfetch.http.transport.default_transport`.
    logger : logging.Logger | logging.LoggerAdapter | None, optional
        Sink for attempt and backoff log lines.
    sleep : Sleeper | None, optional
        Blocking sleep used for backoff. When omitted the fetcher waits on the
        call's cancel event, or ``time.sleep`` without one.
    """

    def __init__(
        self,
        settings: FetchSettings | None = None,
        *,
        validator: UrlValidator = validate_url,
        transport: TransportProvider | None = None,
        logger: logging.Logger | logging.LoggerAdapter | None = None,  # type: ignore[type-arg]
        sleep: Sleeper | None = None,
    ) -> None:
        self.settings = settings or FetchSettings()
        self._validate = validator
        self._transport = transport or default_transport
        self._logger = logger or get_logger(__name__)
        self._sleep = sleep

    def get(self, url: str, *, cancel: threading.Event | None = None) -> bytes:
        """Fetch ``url`` and return the complete response body.

        Parameters
        ----------
        url : str
            Absolute http(s) URL.
        cancel : threading.Event | None, optional
            When set, the next attempt or the running backoff sleep is
            abandoned. An attempt already in flight is bounded by
            ``timeout_s``.

        Returns
        -------
        bytes
            Response body of the first 2xx response.

        Raises
        ------
        InvalidInputError
            If the URL is empty, malformed or not HTTP.
        NotFoundError
            If the server answers with a 4xx status.
        FetchTimeoutError
            If ``max_retries`` attempts fail.
        FetchCancelledError
            If ``cancel`` is set before the fetch completes.
        FetchError
            If the body of a 2xx response cannot be read.
        """
        target = self._validate(url)
        settings = self.settings
        attempts = 0

        if settings.max_retries <= 0:
            raise self._exhausted(target, None)

        def _attempt() -> bytes:
            nonlocal attempts
            if cancel is not None and cancel.is_set():
                raise self._cancelled(target, attempts)
            attempts += 1
            return self._fetch_once(client, target)

        def _sleep(seconds: float) -> None:
            if self._backoff(seconds, cancel):
                raise self._cancelled(target, attempts)

        strategy = TenacityRetryStrategy(
            RetryPolicy(max_retries=settings.max_retries, max_backoff_s=settings.max_backoff_s),
            sleep=_sleep,
            logger=self._logger,
        )
        with httpx.Client(
            transport=self._transport(settings),
            timeout=request_timeout(settings),
            follow_redirects=False,
        ) as client:
            try:
                return strategy.run(_attempt, target=target)
            except HttpError as exc:
                raise self._exhausted(target, exc) from exc

    def _fetch_once(self, client: httpx.Client, target: str) -> bytes:
        """Run one attempt: connect, GET, classify, read the body.

        Parameters
        ----------
        client : httpx.Client
            Client owned by the current :meth:`get` call.
        target : str
            Validated URL.

        Returns
        -------
        bytes
            Body of a 2xx response.

        Raises
        ------
        HttpError
            On a transport failure or a retried status class.
        NotFoundError
            On a 4xx response.
        FetchError
            When the body of a 2xx response cannot be read in time.
        """
        timeout_s = self.settings.timeout_s
        deadline = time.monotonic() + timeout_s
        try:
            with client.stream("GET", target) as response:
                if time.monotonic() > deadline:
                    msg = f"Deadline of {timeout_s}s exceeded waiting for response headers"
                    raise HttpTimeoutError(msg)
                status = response.status_code // 100
                if status == HTTP_2XX:
                    return self._read_body(response, target, deadline)
                if status == HTTP_4XX:
                    msg = f"Not found. HTTP status code: {response.status_code}"
                    raise NotFoundError(msg, url=target, status=response.status_code)
                raise HttpStatusError(response.status_code)
        except httpx.TransportError as exc:
            raise translate_transport_error(exc) from exc

    def _read_body(self, response: httpx.Response, target: str, deadline: float) -> bytes:
        chunks: list[bytes] = []
        try:
            for chunk in response.iter_bytes():
                chunks.append(chunk)
                if time.monotonic() > deadline:
                    msg = f"Deadline of {self.settings.timeout_s}s exceeded reading body"
                    raise FetchError(msg, context={"url": target})
        except httpx.HTTPError as exc:
            msg = f"Unable to read response body from {target}: {exc}"
            raise FetchError(msg, cause=exc, context={"url": target}) from exc
        return b"".join(chunks)

    def _backoff(self, seconds: float, cancel: threading.Event | None) -> bool:
        """Sleep for ``seconds``; return True when the fetch was cancelled."""
        if self._sleep is not None:
            self._sleep(seconds)
            return cancel is not None and cancel.is_set()
        if cancel is not None:
            return cancel.wait(seconds)
        time.sleep(seconds)
        return False

    def _exhausted(self, target: str, last_error: HttpError | None) -> FetchTimeoutError:
        max_retries = self.settings.max_retries
        msg = f"Unable to fetch data. Maximum retries reached: {max_retries}"
        self._logger.error(
            msg,
            extra={"operation": "fetch", "url": target, "attempts": max_retries},
        )
        return FetchTimeoutError(msg, url=target, attempts=max_retries, last_error=last_error)

    def _cancelled(self, target: str, attempts: int) -> FetchCancelledError:
        msg = f"Fetch of {target} cancelled after {attempts} attempt(s)"
        self._logger.info(
            msg,
            extra={"operation": "fetch", "status": "cancelled", "url": target},
        )
        return FetchCancelledError(msg, url=target, attempts=attempts)
