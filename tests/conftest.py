"""
ShadowGit MCP Test Configuration

Shared fixtures: registries, tracked repositories, settings and a fake git
executable so the real subprocess path runs without git installed.
"""

import json
import stat
from pathlib import Path

import pytest

from shadowgit_mcp.config.settings import ServerSettings
from shadowgit_mcp.execution.executor import SHADOWGIT_DIR
from shadowgit_mcp.registry import RepositoryEntry, RepositoryRegistry

# Behaviour is selected with FAKE_GIT_MODE; git's own env vars are echoed
# back so tests can see what the executor passed.
FAKE_GIT_SCRIPT = """#!/bin/sh
case "$FAKE_GIT_MODE" in
  env)
    echo "GIT_DIR=$GIT_DIR"
    echo "GIT_WORK_TREE=$GIT_WORK_TREE"
    ;;
  args)
    for a in "$@"; do echo "[$a]"; done
    ;;
  empty)
    ;;
  fatal)
    echo "fatal: bad revision 'nope' in $GIT_DIR" >&2
    exit 128
    ;;
  fail)
    echo "error: something odd happened" >&2
    exit 1
    ;;
  sleep)
    exec sleep 5
    ;;
  big)
    yes shadowgit | head -c 8192
    ;;
  term)
    kill -TERM $$
    ;;
  *)
    echo "ok $*"
    ;;
esac
"""


@pytest.fixture
def tracked_repo(tmp_path) -> Path:
    """A directory that carries a ShadowGit private store."""
    repo = tmp_path / "tracked"
    (repo / SHADOWGIT_DIR).mkdir(parents=True)
    return repo


@pytest.fixture
def untracked_repo(tmp_path) -> Path:
    """An existing directory without a private store."""
    repo = tmp_path / "untracked"
    repo.mkdir()
    return repo


@pytest.fixture
def registry(tracked_repo, untracked_repo) -> RepositoryRegistry:
    return RepositoryRegistry(
        [
            RepositoryEntry(name="tracked", location=str(tracked_repo)),
            RepositoryEntry(name="untracked", location=str(untracked_repo)),
            RepositoryEntry(name="ghost", location="/nonexistent/ghost/repo"),
        ]
    )


@pytest.fixture
def repos_json(tmp_path):
    """Write a repos.json and return its path."""

    def _write(data, name: str = "repos.json") -> Path:
        path = tmp_path / name
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def fake_git(tmp_path) -> Path:
    path = tmp_path / "bin" / "git"
    path.parent.mkdir()
    path.write_text(FAKE_GIT_SCRIPT, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def settings(tmp_path, fake_git) -> ServerSettings:
    return ServerSettings(
        storage_dir=tmp_path / "storage",
        git_executable=str(fake_git),
        timeout_ms=2000,
    )
