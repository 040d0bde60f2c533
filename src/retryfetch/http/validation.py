"""URL validation for the fetch engine."""

from __future__ import annotations

import re

import httpx

from retryfetch.errors import InvalidInputError

__all__ = ["validate_url"]

# Unreserved, sub-delims, and the IPv6 literal delimiters.
_HOST_CHARS = re.compile(r"[A-Za-z0-9\-._~!$&'()*+,;=:\[\]]*")


def validate_url(raw: str) -> str:
    """Parse ``raw`` and return the normalized URL used for the request.

    Any scheme that starts with ``http`` is accepted, which covers ``http``
    and ``https`` but also lets through schemes such as ``httpx``; those
    fail later at the transport and are retried like any transport error.

    Host names are checked after parsing: httpx percent-escapes characters
    such as spaces instead of rejecting them, so an escaped host is refused
    here.

    Parameters
    ----------
    raw : str
        Absolute URL supplied by the caller.

    Returns
    -------
    str
        Re-serialized URL.

    Raises
    ------
    InvalidInputError
        If ``raw`` is empty, cannot be parsed, has an invalid host name,
        or lacks an HTTP scheme.
    """
    if not raw:
        msg = "URL is empty. Skipping."
        raise InvalidInputError(msg, url=raw)
    try:
        url = httpx.URL(raw)
    except httpx.InvalidURL as exc:
        msg = f"URL {raw} could not be parsed: {exc}"
        raise InvalidInputError(msg, url=raw, cause=exc) from exc
    host = url.raw_host.decode("ascii", errors="replace")
    if not _HOST_CHARS.fullmatch(host):
        msg = f"URL {raw} could not be parsed: invalid host name {host!r}"
        raise InvalidInputError(msg, url=raw)
    if not url.scheme.startswith("http"):
        msg = f"URL {raw} does not have a valid HTTP scheme. Skipping."
        raise InvalidInputError(msg, url=raw)
    return str(url)
