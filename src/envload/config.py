from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from envload.loader import DEFAULT_DOTENV_FILES


_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class EnvloadConfig:
    files: tuple[str, ...]
    override: bool
    log_level: Optional[int]


class ConfigError(ValueError):
    pass


def _env_or_default(name: str, default: str) -> str:
    """Read an environment variable or return a default when missing/empty."""
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    value = value.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigError(f"{name} must be one of: {', '.join(sorted(_TRUTHY | _FALSY))}")


def _optional_log_level(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ConfigError(f"{name} is not a valid log level: {value}")
    return level


def load_config() -> EnvloadConfig:
    """Load envload settings from environment variables.

    Optional:
    - ENVLOAD_FILES (comma separated; defaults to .env.local,.env)
    - ENVLOAD_OVERRIDE (overwrite existing variables; defaults to false)
    - ENVLOAD_LOG_LEVEL (DEBUG, INFO, ...; logging stays silent when unset)
    """
    files_raw = _env_or_default("ENVLOAD_FILES", ",".join(DEFAULT_DOTENV_FILES))
    files = tuple(f.strip() for f in files_raw.split(",") if f.strip())
    if not files:
        raise ConfigError("ENVLOAD_FILES must name at least one file")

    return EnvloadConfig(
        files=files,
        override=_env_flag("ENVLOAD_OVERRIDE", False),
        log_level=_optional_log_level("ENVLOAD_LOG_LEVEL"),
    )
