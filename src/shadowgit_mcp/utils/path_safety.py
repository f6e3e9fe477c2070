"""
utils/path_safety.py
Repository identifier resolution.

Turns what the assistant passed as `repo` (a registry name or a filesystem
path) into a location the executor may use, or None.

Order matters: the traversal screen runs on the raw string before the
registry lookup and before any ~-expansion or normalization, so encoded and
backslash variants are caught before they could be canonicalized.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

import structlog

from ..registry import RepositoryRegistry

log = structlog.get_logger("shadowgit.path_safety")

PATH_TRAVERSAL_PATTERNS: tuple[str, ...] = (
    "../",
    "..\\",
    "%2e%2e",
    "..%2f",
    "..%5c",
)

_DRIVE_LETTER = re.compile(r"[A-Za-z]:")
# "C:\x" and "C:/x" are rooted; "C:x" is relative to that drive's cwd
_DRIVE_ROOT = re.compile(r"[A-Za-z]:[\\/]")


def has_path_traversal(identifier: str) -> bool:
    """Case-insensitive check for any traversal pattern."""
    lowered = identifier.lower()
    return any(pattern in lowered for pattern in PATH_TRAVERSAL_PATTERNS)


def looks_like_path(identifier: str) -> bool:
    """True for /abs, ~/home, C:\\ style and \\\\server\\share identifiers."""
    return (
        identifier.startswith("/")
        or identifier.startswith("~")
        or identifier.startswith("\\\\")
        or _DRIVE_LETTER.search(identifier) is not None
    )


def _is_absolute(path: str) -> bool:
    # os.path.isabs() on POSIX does not know drive letters or UNC shares
    return os.path.isabs(path) or path.startswith("\\\\") or bool(_DRIVE_ROOT.match(path))


def normalize_path(identifier: str, home: str | None = None) -> str:
    """Expand a leading ~ (current user only) and collapse . / .. segments.

    "~user" forms are left alone and then fail the absolute-path check.
    """
    if identifier == "~" or identifier.startswith(("~/", "~\\")):
        home = home if home is not None else str(Path.home())
        identifier = home + identifier[1:]
    return os.path.normpath(identifier)


class RepositoryResolver:
    """Resolve repository identifiers against a registry and the filesystem."""

    def __init__(self, registry: RepositoryRegistry, home: str | None = None) -> None:
        self._registry = registry
        self._home = home

    @property
    def registry(self) -> RepositoryRegistry:
        return self._registry

    def resolve(self, identifier: str) -> str | None:
        """Return a usable location for `identifier`, or None if rejected."""
        if has_path_traversal(identifier):
            log.warning("resolve.traversal_rejected", identifier=identifier)
            return None

        # Registered locations are trusted as-is
        location = self._registry.lookup(identifier)
        if location is not None:
            return location

        if not looks_like_path(identifier):
            log.debug("resolve.unknown_name", identifier=identifier)
            return None

        normalized = normalize_path(identifier, self._home)
        if not _is_absolute(normalized):
            log.debug("resolve.not_absolute", identifier=identifier)
            return None

        if not os.path.exists(normalized):
            log.debug("resolve.missing_path", path=normalized)
            return None

        return normalized


__all__ = [
    "PATH_TRAVERSAL_PATTERNS",
    "RepositoryResolver",
    "has_path_traversal",
    "looks_like_path",
    "normalize_path",
]
