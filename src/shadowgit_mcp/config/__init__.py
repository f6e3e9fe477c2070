# config
"""
Configuration Module

Modules:
- settings.py: ServerSettings, storage location and layered loading

Usage:
    from shadowgit_mcp.config import load_settings
"""

from .settings import (
    DEFAULT_MAX_COMMAND_LENGTH,
    DEFAULT_MAX_OUTPUT_BYTES,
    DEFAULT_TIMEOUT_MS,
    REGISTRY_FILENAME,
    ServerSettings,
    get_storage_location,
    load_settings,
    normalize_log_level,
)

__all__ = [
    "DEFAULT_MAX_COMMAND_LENGTH",
    "DEFAULT_MAX_OUTPUT_BYTES",
    "DEFAULT_TIMEOUT_MS",
    "REGISTRY_FILENAME",
    "ServerSettings",
    "get_storage_location",
    "load_settings",
    "normalize_log_level",
]
