"""
execution/security.py
Command authorization for read-only git access.

Provides the allow-list of read-only subcommands, the deny-list of dangerous
tokens, control-character sanitization and the authorize() gate.

The deny-list is matched by plain substring containment over the whole
sanitized command, not by token. Chained commands ("show && commit ...")
are caught, and so are tokens inside longer words: "merge-base" contains
"merge", "--cached" contains "-c".
"""

from __future__ import annotations

import re

from ..config.settings import DEFAULT_MAX_COMMAND_LENGTH
from ..types import Allowed, AuthorizationVerdict, Denied

# Read-only git subcommands. No mutation operations.
SAFE_COMMANDS: tuple[str, ...] = (
    "log",
    "diff",
    "show",
    "blame",
    "grep",
    "status",
    "rev-parse",
    "rev-list",
    "ls-files",
    "cat-file",
    "diff-tree",
    "shortlog",
    "reflog",
    "describe",
    "branch",
    "tag",
    "for-each-ref",
    "ls-tree",
    "merge-base",
    "cherry",
    "count-objects",
)

# Tokens that deny a command wherever they appear in it
BLOCKED_ARGS: tuple[str, ...] = (
    # flags that escape the read-only sandbox
    "--exec",
    "--upload-pack",
    "--receive-pack",
    "-c",
    "--config",
    "--work-tree",
    "--git-dir",
    # mutating subcommands, caught even when chained
    "push",
    "pull",
    "fetch",
    "commit",
    "merge",
    "rebase",
    "reset",
    "clean",
    "checkout",
    "add",
    "rm",
    "mv",
    "restore",
    "stash",
    "remote",
    "submodule",
    "worktree",
    "filter-branch",
    "repack",
    "gc",
    "prune",
    "fsck",
)

_SAFE_COMMAND_SET = frozenset(SAFE_COMMANDS)

# C0 controls except \t \n \r, plus DEL
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def sanitize_command(command: str) -> str:
    """Strip control characters. The result is what gets checked and run."""
    return _CONTROL_CHARS.sub("", command)


def split_command(command: str) -> list[str]:
    """Split on runs of whitespace, as the argument vector for git."""
    return command.split()


def find_blocked_arg(command: str) -> str | None:
    """Return the first deny-listed token contained in `command`, if any."""
    for blocked in BLOCKED_ARGS:
        if blocked in command:
            return blocked
    return None


def authorize(command: str, max_length: int = DEFAULT_MAX_COMMAND_LENGTH) -> AuthorizationVerdict:
    """Decide whether a raw git command string may be executed.

    Args:
        command: Raw command as supplied by the caller, without the leading "git"
        max_length: Upper bound on the raw string length

    Returns:
        Allowed carrying the sanitized command, or Denied with a reason
    """
    if len(command) > max_length:
        return Denied(
            f"Error: Command is too long ({len(command)} characters). "
            f"Maximum length is {max_length} characters."
        )

    sanitized = sanitize_command(command)

    parts = split_command(sanitized)
    if not parts:
        return Denied(
            "Error: Empty command. Provide a git subcommand such as 'log --oneline -5'."
        )

    subcommand = parts[0]
    if subcommand not in _SAFE_COMMAND_SET:
        return Denied(
            f"Error: Command '{subcommand}' is not allowed. "
            "Only read-only commands are permitted.\n\n"
            f"Allowed commands: {', '.join(SAFE_COMMANDS)}"
        )

    blocked = find_blocked_arg(sanitized)
    if blocked is not None:
        return Denied(f"Error: Argument '{blocked}' is not allowed for safety reasons.")

    return Allowed(sanitized.strip())


__all__ = [
    "BLOCKED_ARGS",
    "SAFE_COMMANDS",
    "authorize",
    "find_blocked_arg",
    "sanitize_command",
    "split_command",
]
