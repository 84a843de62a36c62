"""Configuration utilities for loading environment variables."""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

DEFAULT_API_BASE_URL = "http://localhost:3001/api"
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_BLIP_SECONDS = 2.0
DEFAULT_DB_PATH = "flowbridge.db"


def load_env(env_file: Optional[str] = None) -> None:
    """Load environment variables from .env file.

    Args:
        env_file: Optional path to .env file. If not specified, searches
                 for .env in current and parent directories.

    Example:
        >>> from flowbridge.utils.config import load_env
        >>> load_env()  # Loads from .env
        >>> get_api_base_url()
        'http://localhost:3001/api'
    """
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()


def get_config(key: str, default: Optional[str] = None) -> Optional[str]:
    """Get configuration value from environment.

    Args:
        key: Configuration key
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    return os.getenv(key, default)


def _get_float(key: str, default: float) -> float:
    raw = get_config(key)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{key} must be a number, got {raw!r}")


def get_api_base_url() -> str:
    """Base URL of the Telegram/ArDrive backend API."""
    return get_config("FLOWBRIDGE_API_URL", DEFAULT_API_BASE_URL).rstrip("/")


def get_http_timeout() -> float:
    """Timeout in seconds applied to every backend HTTP request."""
    return _get_float("FLOWBRIDGE_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT)


def get_blip_seconds() -> float:
    """Seconds a trigger shows ``success`` before reverting to ``running``."""
    return _get_float("FLOWBRIDGE_BLIP_SECONDS", DEFAULT_BLIP_SECONDS)


def get_sqlite_path() -> str:
    """Path of the SQLite database used by :class:`SQLiteBackend`."""
    return get_config("FLOWBRIDGE_DB_PATH", DEFAULT_DB_PATH)


def get_log_level() -> str:
    return get_config("FLOWBRIDGE_LOG_LEVEL", "INFO")


@dataclass
class EngineConfig:
    """Tunables for :class:`~flowbridge.core.engine.WorkflowEngine`.

    Attributes:
        blip_seconds: Delay before an emitting trigger reverts to ``running``
        max_concurrency: Upper bound on concurrently running notify targets
    """

    blip_seconds: float = field(default_factory=get_blip_seconds)
    max_concurrency: int = 10

    def __post_init__(self):
        if self.blip_seconds < 0:
            raise ValueError("blip_seconds must not be negative")
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
