"""Typed exception hierarchy for fetch results.

All retryfetch exceptions inherit from FetchError, which carries a stable
error code, a logging level, a context mapping and the underlying cause.
Callers dispatch on the exception type (or ``code``) instead of inspecting
messages.

Examples
--------
>>> from retryfetch.errors import ErrorCode, NotFoundError
>>> try:
...     raise NotFoundError("Not found. HTTP status code: 404", url="http://x", status=404)
... except NotFoundError as e:
...     assert e.code == ErrorCode.NOT_FOUND
...     assert e.status == 404
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from retryfetch.errors.codes import ErrorCode

__all__ = [
    "FetchCancelledError",
    "FetchError",
    "FetchTimeoutError",
    "InvalidInputError",
    "NotFoundError",
    "SettingsError",
]


class FetchError(Exception):
    """Base exception for all retryfetch errors.

    Raised directly for unclassified failures, such as a body read error
    after a successful status. Subclasses mark the classified outcomes.

    Parameters
    ----------
    message : str
        Human-readable error message.
    code : ErrorCode, optional
        Error code enum value. Defaults to ``ErrorCode.FETCH_FAILED``.
    log_level : int, optional
        Logging level callers should use when reporting the error.
    cause : BaseException | None, optional
        Underlying exception, preserved as ``__cause__``.
    context : Mapping[str, object] | None, optional
        Structured details (url, status, attempts).

    Attributes
    ----------
    message : str
        Human-readable error message.
    code : ErrorCode
        Error code enum value.
    log_level : int
        Logging level for error reporting.
    context : dict[str, object]
        Additional context dictionary for error details.
    """

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode = ErrorCode.FETCH_FAILED,
        log_level: int = logging.ERROR,
        cause: BaseException | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.log_level = log_level
        self.context = dict(context) if context else {}
        if cause is not None:
            self.__cause__ = cause

    @property
    def url(self) -> str | None:
        """Return the URL the error refers to, when known."""
        value = self.context.get("url")
        return value if isinstance(value, str) else None

    def __str__(self) -> str:
        """Return formatted error string.

        Returns
        -------
        str
            Formatted error string (e.g., "NotFoundError[not-found]: Not found. HTTP status code: 404").
        """
        base = f"{self.__class__.__name__}[{self.code.value}]: {self.message}"
        if self.__cause__:
            base += f" (caused by: {type(self.__cause__).__name__})"
        return base


class InvalidInputError(FetchError):
    """Raised when a URL is empty, unparseable or not an HTTP(S) URL.

    Never retried; raised before any network operation.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.INVALID_INPUT,
            log_level=logging.WARNING,
            cause=cause,
            context={"url": url} if url is not None else None,
        )


class NotFoundError(FetchError):
    """Raised when the server answers with a 4xx status.

    Client errors are treated as definitive: the fetch stops immediately
    whatever retry budget is left.

    Parameters
    ----------
    message : str
        Human-readable error message.
    url : str
        Requested URL.
    status : int
        HTTP status code of the response.
    """

    def __init__(self, message: str, *, url: str, status: int) -> None:
        super().__init__(
            message,
            code=ErrorCode.NOT_FOUND,
            log_level=logging.WARNING,
            context={"url": url, "status": status},
        )
        self.status = status


class FetchTimeoutError(FetchError):
    """Raised when the retry budget is exhausted without success.

    Parameters
    ----------
    message : str
        Human-readable error message.
    url : str
        Requested URL.
    attempts : int
        Retry budget that was exhausted (the configured ``max_retries``).
    last_error : BaseException | None, optional
        Last transient failure, preserved as the cause. None when the budget
        allowed no attempts at all.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str,
        attempts: int,
        last_error: BaseException | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.RETRY_EXHAUSTED,
            cause=last_error,
            context={"url": url, "attempts": attempts},
        )
        self.attempts = attempts
        self.last_error = last_error


class FetchCancelledError(FetchError):
    """Raised when the caller's cancellation signal fires mid-fetch."""

    def __init__(self, message: str, *, url: str, attempts: int) -> None:
        super().__init__(
            message,
            code=ErrorCode.CANCELLED,
            log_level=logging.INFO,
            context={"url": url, "attempts": attempts},
        )
        self.attempts = attempts


class SettingsError(FetchError):
    """Raised when fetch settings fail validation or cannot be loaded."""

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        context: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(
            message,
            code=ErrorCode.CONFIGURATION_ERROR,
            cause=cause,
            context=context,
        )
