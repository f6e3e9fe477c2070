# config/settings.py
"""
Server Settings - Layered Configuration

Layers (later wins):
1. Built-in defaults
2. <storage_dir>/mcp-settings.yaml (optional)
3. Environment variables

Environment:
    SHADOWGIT_HOME       Override the ShadowGit storage directory
    SHADOWGIT_GIT        Override the git executable
    SHADOWGIT_TIMEOUT    Command timeout in milliseconds
    SHADOWGIT_LOG_LEVEL  debug | info | warn | error

Usage:
    from shadowgit_mcp.config.settings import load_settings
    settings = load_settings()
    settings.registry_path  # -> ~/.local/share/shadowgit/repos.json
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import structlog
import yaml

log = structlog.get_logger("shadowgit.config")

REGISTRY_FILENAME = "repos.json"
SETTINGS_FILENAME = "mcp-settings.yaml"

DEFAULT_TIMEOUT_MS = 10_000
DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024
DEFAULT_MAX_COMMAND_LENGTH = 1000
DEFAULT_SHUTDOWN_GRACE = 0.5

_LOG_LEVEL_ALIASES = {
    "debug": "DEBUG",
    "info": "INFO",
    "warn": "WARNING",
    "warning": "WARNING",
    "error": "ERROR",
}

# YAML keys that map straight onto integer settings
_INT_KEYS = ("timeout_ms", "max_output_bytes", "max_command_length")


def get_storage_location(
    platform: str | None = None,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> Path:
    """Return the ShadowGit storage directory for this platform.

    macOS keeps it in ~/.shadowgit, Windows under LOCALAPPDATA, everything
    else follows the XDG data directory convention.
    """
    platform = platform or sys.platform
    environ = os.environ if environ is None else environ
    home = home or Path.home()

    override = environ.get("SHADOWGIT_HOME")
    if override:
        return Path(override).expanduser()

    if platform == "darwin":
        return home / ".shadowgit"
    if platform == "win32":
        base = environ.get("LOCALAPPDATA") or str(home / "AppData" / "Local")
        return Path(base) / "shadowgit"

    base = environ.get("XDG_DATA_HOME") or str(home / ".local" / "share")
    return Path(base) / "shadowgit"


def normalize_log_level(value: str | None, default: str = "INFO") -> str:
    """Map user-facing level names (including 'warn') to logging names."""
    if not value:
        return default
    level = _LOG_LEVEL_ALIASES.get(value.strip().lower())
    if level is None:
        log.warning("settings.invalid_log_level", value=value, fallback=default)
        return default
    return level


@dataclass(frozen=True, slots=True)
class ServerSettings:
    """Effective configuration for one server process."""

    storage_dir: Path
    git_executable: str = "git"
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES
    max_command_length: int = DEFAULT_MAX_COMMAND_LENGTH
    log_level: str = "INFO"
    shutdown_grace: float = DEFAULT_SHUTDOWN_GRACE

    @property
    def registry_path(self) -> Path:
        return self.storage_dir / REGISTRY_FILENAME

    @property
    def settings_path(self) -> Path:
        return self.storage_dir / SETTINGS_FILENAME


def _positive_int(key: str, value: Any, fallback: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        log.warning("settings.invalid_value", key=key, value=value, fallback=fallback)
        return fallback
    if number <= 0:
        log.warning("settings.invalid_value", key=key, value=value, fallback=fallback)
        return fallback
    return number


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML mapping; anything unreadable counts as empty."""
    if not path.is_file():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        log.warning("settings.unreadable", path=str(path), error=str(e))
        return {}
    if not isinstance(data, dict):
        log.warning("settings.not_a_mapping", path=str(path))
        return {}
    return data


def _apply_file(settings: ServerSettings, data: Mapping[str, Any]) -> ServerSettings:
    changes: dict[str, Any] = {}
    for key in _INT_KEYS:
        if key in data:
            changes[key] = _positive_int(key, data[key], getattr(settings, key))
    if "log_level" in data:
        changes["log_level"] = normalize_log_level(str(data["log_level"]), settings.log_level)
    if "git_executable" in data and data["git_executable"]:
        changes["git_executable"] = str(data["git_executable"])
    return replace(settings, **changes) if changes else settings


def _apply_env(settings: ServerSettings, environ: Mapping[str, str]) -> ServerSettings:
    changes: dict[str, Any] = {}
    if environ.get("SHADOWGIT_TIMEOUT"):
        changes["timeout_ms"] = _positive_int(
            "SHADOWGIT_TIMEOUT", environ["SHADOWGIT_TIMEOUT"], settings.timeout_ms
        )
    if environ.get("SHADOWGIT_LOG_LEVEL"):
        changes["log_level"] = normalize_log_level(environ["SHADOWGIT_LOG_LEVEL"], settings.log_level)
    if environ.get("SHADOWGIT_GIT"):
        changes["git_executable"] = environ["SHADOWGIT_GIT"]
    return replace(settings, **changes) if changes else settings


def load_settings(
    environ: Mapping[str, str] | None = None,
    storage_dir: Path | None = None,
) -> ServerSettings:
    """Resolve defaults, the optional settings file and the environment."""
    environ = os.environ if environ is None else environ
    if storage_dir is None:
        storage_dir = get_storage_location(environ=environ)

    settings = ServerSettings(storage_dir=storage_dir)
    settings = _apply_file(settings, _read_yaml(settings.settings_path))
    return _apply_env(settings, environ)


__all__ = [
    "DEFAULT_MAX_COMMAND_LENGTH",
    "DEFAULT_MAX_OUTPUT_BYTES",
    "DEFAULT_TIMEOUT_MS",
    "REGISTRY_FILENAME",
    "SETTINGS_FILENAME",
    "ServerSettings",
    "get_storage_location",
    "load_settings",
    "normalize_log_level",
]
