"""
Configuration loader for pmreview.

Builds the ApiConfig handed to ReviewApiClient from a .env file plus
process environment overrides. Nothing else reads configuration; the
client never looks at the environment itself.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from . import envparse
from .constants import DEFAULT_API_URL, DEFAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILE = Path.home() / ".config" / "pmreview" / "pmreview.env"

CONFIG_KEYS = ("PMR_API_URL", "PMR_API_KEY", "PMR_TIMEOUT")


class ConfigError(Exception):
    """Configuration is missing or invalid."""


@dataclass(frozen=True)
class ApiConfig:
    """Collaborator service connection settings."""
    base_url: str
    api_key: str
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    def __repr__(self) -> str:
        # Keep the credential out of logs and tracebacks
        return f"ApiConfig(base_url={self.base_url!r}, api_key=<{len(self.api_key)} chars>, timeout={self.timeout})"


def _parse_timeout(value: str) -> float:
    try:
        timeout = float(value)
    except ValueError:
        raise ConfigError(f"PMR_TIMEOUT must be a number of seconds, got '{value}'") from None
    if timeout <= 0:
        raise ConfigError(f"PMR_TIMEOUT must be positive, got '{value}'")
    return timeout


def load_api_config(
    env_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ApiConfig:
    """Load ApiConfig from env file and environment.

    Args:
        env_file: Explicit env file. Must exist if given. Defaults to
            ~/.config/pmreview/pmreview.env, which is optional.
        environ: Environment mapping (defaults to os.environ). Its PMR_*
            values override the file.

    Raises:
        ConfigError: If the file is malformed, the API key is missing or
            the timeout is invalid.
    """
    if environ is None:
        environ = os.environ

    values: dict[str, str] = {}
    path = env_file if env_file is not None else DEFAULT_ENV_FILE
    try:
        values.update(envparse.load_env(path))
        logger.debug(f"Loaded config from {path}")
    except FileNotFoundError:
        if env_file is not None:
            raise ConfigError(f"Env file not found: {env_file}") from None
    except ValueError as e:
        raise ConfigError(f"Invalid env file {path}: {e}") from None

    for key in CONFIG_KEYS:
        if environ.get(key):
            values[key] = environ[key]

    api_key = values.get("PMR_API_KEY", "").strip()
    if not api_key:
        raise ConfigError("PMR_API_KEY is not set (env file or environment)")

    base_url = values.get("PMR_API_URL", "").strip() or DEFAULT_API_URL
    timeout = DEFAULT_TIMEOUT_SECONDS
    if values.get("PMR_TIMEOUT"):
        timeout = _parse_timeout(values["PMR_TIMEOUT"])

    return ApiConfig(base_url=base_url.rstrip("/"), api_key=api_key, timeout=timeout)
