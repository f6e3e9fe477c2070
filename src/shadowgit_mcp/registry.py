"""
registry.py - ShadowGit repository registry

Loads the name -> location table from ShadowGit's repos.json once at
startup. The table is read-only afterwards; picking up new repositories
requires a restart.

repos.json format:
    [{"name": "my-app", "path": "/Users/alex/my-app"}, ...]

A missing or malformed file means "no repositories tracked yet", not an
error.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

log = structlog.get_logger("shadowgit.registry")


class RepositoryEntry(BaseModel):
    """One tracked repository. `path` in the JSON source maps to `location`."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(..., description="Display name, unique within the registry")
    location: str = Field(..., alias="path", description="Absolute filesystem path")


class RepositoryRegistry:
    """Immutable mapping of repository name to location."""

    __slots__ = ("_repos",)

    def __init__(self, entries: Iterable[RepositoryEntry] = ()) -> None:
        repos: dict[str, str] = {}
        for entry in entries:
            # Last write wins for duplicate names
            repos[entry.name] = entry.location
        self._repos: Mapping[str, str] = MappingProxyType(repos)

    @classmethod
    def load(cls, source: Path) -> RepositoryRegistry:
        """Build a registry from a repos.json file.

        Read or parse failures yield an empty registry.
        """
        raw = _read_source(source)
        entries: list[RepositoryEntry] = []
        for index, item in enumerate(raw):
            try:
                entries.append(RepositoryEntry.model_validate(item))
            except ValidationError as e:
                log.warning(
                    "registry.invalid_entry",
                    source=str(source),
                    index=index,
                    errors=e.error_count(),
                )

        registry = cls(entries)
        log.info("registry.loaded", source=str(source), count=len(registry))
        return registry

    def lookup(self, identifier: str) -> str | None:
        """Exact-match lookup; no fuzzy or prefix matching."""
        return self._repos.get(identifier)

    def entries(self) -> list[RepositoryEntry]:
        return [RepositoryEntry(name=name, location=loc) for name, loc in self._repos.items()]

    def names(self) -> list[str]:
        return list(self._repos)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._repos

    def __len__(self) -> int:
        return len(self._repos)

    def __bool__(self) -> bool:
        return bool(self._repos)

    def __repr__(self) -> str:
        return f"RepositoryRegistry({len(self._repos)} repos)"


def _read_source(source: Path) -> list[Any]:
    if not source.exists():
        log.info("registry.source_missing", source=str(source))
        return []
    try:
        data = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        log.warning("registry.unreadable", source=str(source), error=str(e))
        return []
    if not isinstance(data, list):
        log.warning("registry.not_a_list", source=str(source), found=type(data).__name__)
        return []
    return data


def load_registry(source: Path) -> RepositoryRegistry:
    """Convenience wrapper around RepositoryRegistry.load()."""
    return RepositoryRegistry.load(source)


__all__ = ["RepositoryEntry", "RepositoryRegistry", "load_registry"]
