"""Error code registry and type URIs.

Codes and URIs are stable identifiers callers can log, match on or surface to
their own users.

Examples
--------
>>> from retryfetch.errors.codes import ErrorCode, get_type_uri
>>> get_type_uri(ErrorCode.NOT_FOUND)
'https://retryfetch.dev/problems/not-found'
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final

__all__ = [
    "BASE_TYPE_URI",
    "ErrorCode",
    "get_type_uri",
]

BASE_TYPE_URI: Final[str] = "https://retryfetch.dev/problems"


class ErrorCode(StrEnum):
    """Stable error codes for retryfetch exceptions.

    Attributes
    ----------
    INVALID_INPUT
        Malformed or non-HTTP URL.
    NOT_FOUND
        Terminal client-side (4xx) response.
    RETRY_EXHAUSTED
        Retry budget exhausted without success.
    FETCH_FAILED
        Unclassified failure, such as a body read error after a 2xx status.
    CANCELLED
        The caller cancelled the fetch.
    CONFIGURATION_ERROR
        Settings failed validation or could not be loaded.
    """

    INVALID_INPUT = "invalid-input"
    NOT_FOUND = "not-found"
    RETRY_EXHAUSTED = "retry-exhausted"
    FETCH_FAILED = "fetch-failed"
    CANCELLED = "cancelled"
    CONFIGURATION_ERROR = "configuration-error"

    def __str__(self) -> str:
        """Return the kebab-case code value."""
        return self.value


def get_type_uri(code: ErrorCode) -> str:
    """Return the type URI for an error code.

    Parameters
    ----------
    code : ErrorCode
        Error code enum value.

    Returns
    -------
    str
        URI of the form ``https://retryfetch.dev/problems/<code>``.
    """
    return f"{BASE_TYPE_URI}/{code.value}"
