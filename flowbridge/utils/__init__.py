"""Utility functions and helpers."""

from flowbridge.utils.config import (
    EngineConfig,
    load_env,
    get_config,
    get_api_base_url,
    get_http_timeout,
    get_blip_seconds,
    get_sqlite_path,
    get_log_level,
)
from flowbridge.utils.errors import (
    FlowbridgeError,
    NodeNotFoundError,
    UnknownNodeTypeError,
    ConfigurationError,
    AdapterError,
    AdapterHandshakeError,
    NodeExecutionError,
    SnapshotError,
)

__all__ = [
    "EngineConfig",
    "load_env",
    "get_config",
    "get_api_base_url",
    "get_http_timeout",
    "get_blip_seconds",
    "get_sqlite_path",
    "get_log_level",
    "FlowbridgeError",
    "NodeNotFoundError",
    "UnknownNodeTypeError",
    "ConfigurationError",
    "AdapterError",
    "AdapterHandshakeError",
    "NodeExecutionError",
    "SnapshotError",
]
