"""Retrying HTTP GET client with exponential backoff.

Examples
--------
>>> import retryfetch
>>> body = retryfetch.get("https://example.com/")  # doctest: +SKIP
"""

from __future__ import annotations

import threading

from retryfetch.errors import (
    ErrorCode,
    FetchCancelledError,
    FetchError,
    FetchTimeoutError,
    InvalidInputError,
    NotFoundError,
    SettingsError,
)
from retryfetch.http import RetryingFetcher, make_fetcher_from_file, validate_url
from retryfetch.settings import FetchSettings, load_settings, load_settings_file

__all__ = [
    "ErrorCode",
    "FetchCancelledError",
    "FetchError",
    "FetchSettings",
    "FetchTimeoutError",
    "InvalidInputError",
    "NotFoundError",
    "RetryingFetcher",
    "SettingsError",
    "get",
    "load_settings",
    "load_settings_file",
    "make_fetcher_from_file",
    "validate_url",
]

__version__ = "0.1.0"


def get(
    url: str,
    settings: FetchSettings | None = None,
    *,
    cancel: threading.Event | None = None,
) -> bytes:
    """Fetch ``url`` with a default :class:`RetryingFetcher`.

    Parameters
    ----------
    url : str
        Absolute http(s) URL.
    settings : FetchSettings | None, optional
        Fetch tunables. Defaults to ``FetchSettings()``, which also reads
        ``RETRYFETCH_*`` environment variables.
    cancel : threading.Event | None, optional
        Cancellation signal checked between attempts and during backoff.

    Returns
    -------
    bytes
        Complete response body.
    """
    return RetryingFetcher(settings).get(url, cancel=cancel)
