"""Default transport provider backed by httpx."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from retryfetch.settings import FetchSettings

__all__ = ["default_transport", "request_timeout"]


def default_transport(settings: FetchSettings) -> httpx.BaseTransport:
    """Return a fresh HTTP transport honouring the TLS verification mode.

    httpx's own connection retries are disabled; the fetch engine owns the
    retry loop.
    """
    return httpx.HTTPTransport(verify=not settings.skip_tls_verification, retries=0)


def request_timeout(settings: FetchSettings) -> httpx.Timeout:
    """Return the per-operation deadline applied to every attempt.

    A negative ``timeout_s`` is treated as zero, so the attempt fails at once.
    """
    return httpx.Timeout(max(settings.timeout_s, 0.0))
