"""Exception hierarchy and error codes for retryfetch."""

from __future__ import annotations

from retryfetch.errors.codes import BASE_TYPE_URI, ErrorCode, get_type_uri
from retryfetch.errors.exceptions import (
    FetchCancelledError,
    FetchError,
    FetchTimeoutError,
    InvalidInputError,
    NotFoundError,
    SettingsError,
)

__all__ = [
    "BASE_TYPE_URI",
    "ErrorCode",
    "FetchCancelledError",
    "FetchError",
    "FetchTimeoutError",
    "InvalidInputError",
    "NotFoundError",
    "SettingsError",
    "get_type_uri",
]
