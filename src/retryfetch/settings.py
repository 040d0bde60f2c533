"""Fetch settings with typed configuration and fail-fast validation.

FetchSettings is an immutable pydantic_settings.BaseSettings: defaults come
from the class, environment variables prefixed ``RETRYFETCH_`` override them,
and keyword arguments override both.

Examples
--------
>>> from retryfetch.settings import FetchSettings
>>> settings = FetchSettings(max_retries=3)
>>> settings.max_retries, settings.timeout_s
(3, 2.0)
"""

from __future__ import annotations

from pathlib import Path
from typing import Self

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from retryfetch.errors import SettingsError
from retryfetch.logging import get_logger

__all__ = [
    "FetchSettings",
    "load_settings",
    "load_settings_file",
]

logger = get_logger(__name__)


class FetchSettings(BaseSettings):
    """Tunables for the retrying fetcher.

    No minimums are enforced: ``max_retries=0`` is valid and makes every
    fetch fail with a timeout error without any attempt.
    """

    model_config = SettingsConfigDict(
        env_prefix="RETRYFETCH_",
        extra="forbid",
        frozen=True,
        case_sensitive=False,
    )

    max_backoff_s: float = Field(
        default=5.0, description="Ceiling for the exponential backoff delay, in seconds"
    )
    max_retries: int = Field(default=15, description="Maximum number of attempts per fetch")
    timeout_s: float = Field(
        default=2.0, description="Deadline for each connection attempt, in seconds"
    )
    skip_tls_verification: bool = Field(
        default=False, description="Disable TLS certificate verification"
    )

    def with_overrides(self, **changes: object) -> Self:
        """Return a validated copy with ``changes`` applied.

        Parameters
        ----------
        **changes : object
            Field values to replace.

        Returns
        -------
        Self
            New settings instance; this one is left untouched.
        """
        if not changes:
            return self
        return type(self).model_validate({**self.model_dump(), **changes})


def load_settings(**overrides: object) -> FetchSettings:
    """Load :class:`FetchSettings` from the environment with optional overrides.

    Parameters
    ----------
    **overrides : object
        Field values taking precedence over environment variables.

    Returns
    -------
    FetchSettings
        Validated settings.

    Raises
    ------
    SettingsError
        If the resulting settings fail validation.
    """
    try:
        return FetchSettings(**overrides)  # type: ignore[arg-type]  # BaseSettings.__init__ accepts Any kwargs
    except Exception as exc:
        msg = f"Configuration validation failed: {exc}"
        logger.exception(
            "Settings validation failed",
            extra={"operation": "load_settings", "error_type": type(exc).__name__},
        )
        raise SettingsError(
            msg,
            cause=exc,
            context={"validation_error": str(exc)},
        ) from exc


def load_settings_file(path: Path | str, **overrides: object) -> FetchSettings:
    """Load :class:`FetchSettings` from a YAML mapping.

    Parameters
    ----------
    path : Path | str
        YAML file whose top-level mapping holds settings fields.
    **overrides : object
        Field values taking precedence over the file.

    Returns
    -------
    FetchSettings
        Validated settings.

    Raises
    ------
    SettingsError
        If the file is missing, is not valid YAML, does not hold a mapping,
        or the values fail validation.
    """
    path = Path(path)
    try:
        obj = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        msg = f"Settings file not found: {path}"
        raise SettingsError(msg, cause=exc, context={"path": str(path)}) from exc
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in settings file {path}: {exc}"
        raise SettingsError(msg, cause=exc, context={"path": str(path)}) from exc

    if obj is None:
        obj = {}
    if not isinstance(obj, dict):
        msg = f"Settings file {path} must contain a mapping, got {type(obj).__name__}"
        raise SettingsError(msg, context={"path": str(path)})

    logger.debug(
        "Loaded settings file",
        extra={"operation": "load_settings", "path": str(path)},
    )
    return load_settings(**{**obj, **overrides})
