"""HTTP fetch engine with retry and backoff support.

This package provides RetryingFetcher, its tenacity-based retry strategy,
the default httpx transport provider and URL validation.
"""

from __future__ import annotations

from pathlib import Path

from retryfetch.http.client import RetryingFetcher
from retryfetch.http.tenacity_retry import (
    BACKOFF_FLOOR_S,
    DoublingBackoff,
    RetryPolicy,
    TenacityRetryStrategy,
    backoff_sequence,
)
from retryfetch.http.validation import validate_url
from retryfetch.settings import load_settings_file

__all__ = [
    "BACKOFF_FLOOR_S",
    "DoublingBackoff",
    "RetryPolicy",
    "RetryingFetcher",
    "TenacityRetryStrategy",
    "backoff_sequence",
    "make_fetcher_from_file",
    "validate_url",
]


def make_fetcher_from_file(path: Path | str, **overrides: object) -> RetryingFetcher:
    """Create a fetcher whose settings are loaded from a YAML file.

    Parameters
    ----------
    path : Path | str
        YAML file holding ``FetchSettings`` fields.
    **overrides : object
        Field values taking precedence over the file.

    Returns
    -------
    RetryingFetcher
        Fetcher using the loaded settings and default collaborators.
    """
    return RetryingFetcher(load_settings_file(path, **overrides))
