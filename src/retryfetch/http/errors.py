"""Transient HTTP failure classes.

These exceptions drive the retry loop: every HttpError raised by an attempt
is retried, and the last one becomes the cause of the final
:class:`~retryfetch.errors.FetchTimeoutError`. They never reach callers
directly.
"""

from __future__ import annotations

import ssl

import httpx


class HttpError(Exception):
    """Base exception for all retryable HTTP failures."""


class HttpStatusError(HttpError):
    """Exception raised for a response whose status class is retried.

    Parameters
    ----------
    status : int
        HTTP status code.

    Notes
    -----
    After initialization, this exception has instance attributes:
    - ``status``: The HTTP status code (int)
    """

    def __init__(self, status: int) -> None:
        super().__init__(f"Server error. HTTP status code: {status}")
        self.status = status


class HttpTimeoutError(HttpError):
    """Exception raised when a connect, read or write deadline expires."""


class HttpConnectionError(HttpError):
    """Exception raised when the connection cannot be established."""


class HttpTlsError(HttpError):
    """Exception raised when the TLS handshake or certificate check fails."""


class HttpRequestError(HttpError):
    """Exception raised for any other transport-level failure."""


def _caused_by_ssl(exc: BaseException) -> bool:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        if isinstance(current, ssl.SSLError):
            return True
        seen.add(id(current))
        current = current.__cause__ or current.__context__
    return False


def translate_transport_error(exc: httpx.TransportError) -> HttpError:
    """Map an httpx transport failure onto the HttpError taxonomy.

    Parameters
    ----------
    exc : httpx.TransportError
        Failure raised by httpx before a response was received.

    Returns
    -------
    HttpError
        Matching retryable error; the caller chains ``exc`` as its cause.
    """
    message = str(exc) or type(exc).__name__
    if isinstance(exc, httpx.TimeoutException):
        return HttpTimeoutError(message)
    if _caused_by_ssl(exc) or "CERTIFICATE_VERIFY_FAILED" in message:
        return HttpTlsError(message)
    if isinstance(exc, httpx.ConnectError):
        return HttpConnectionError(message)
    return HttpRequestError(message)
