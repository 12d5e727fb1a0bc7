"""Runtime configuration from defaults, environment and command-line overrides."""

from __future__ import annotations

import logging
import os
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from endzeit.models import AppConfig

log = logging.getLogger(__name__)

_ENV_PREFIX = "ENDZEIT_"

# Environment variable suffix -> AppConfig field
_ENV_FIELDS: dict[str, str] = {
    "TICK_INTERVAL": "tick_interval",
    "QUIT_KEY": "quit_key",
    "BELL": "bell",
    "LOG_LEVEL": "log_level",
}


def _read_env(environ: Mapping[str, str]) -> dict[str, str]:
    values: dict[str, str] = {}
    for suffix, field in _ENV_FIELDS.items():
        raw = environ.get(_ENV_PREFIX + suffix)
        if raw is not None and raw.strip():
            values[field] = raw.strip()
    return values


def load_config(environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Load config from ENDZEIT_* variables, returning defaults if they are unusable."""
    env = os.environ if environ is None else environ
    values = _read_env(env)
    if not values:
        return AppConfig()
    try:
        return AppConfig(**values)
    except ValidationError as exc:
        log.warning("Ignoring invalid ENDZEIT_* settings: %s", exc)
        return AppConfig()


def apply_overrides(config: AppConfig, **overrides: Any) -> AppConfig:
    """Return a validated copy of ``config`` with non-None overrides applied.

    Raises pydantic.ValidationError if an override is out of range.
    """
    updates = {key: value for key, value in overrides.items() if value is not None}
    if not updates:
        return config
    return AppConfig(**{**config.model_dump(), **updates})
