"""
execution - Read-only git command gate and runner.

Modules:
- protocols.py: IGitExecutor, ICommandAuthorizer protocols
- security.py: allow-list, deny-list, sanitization and authorize()
- executor.py: GitExecutor and outcome classification

Usage:
    from shadowgit_mcp.execution import GitExecutor, authorize

    verdict = authorize("log --oneline -5")
    outcome = await GitExecutor().run(verdict.command, "/path/to/repo")
"""

from .protocols import ICommandAuthorizer, IGitExecutor
from .security import (
    BLOCKED_ARGS,
    SAFE_COMMANDS,
    authorize,
    find_blocked_arg,
    sanitize_command,
    split_command,
)
from .executor import (
    EMPTY_OUTPUT,
    REDACTED,
    SHADOWGIT_DIR,
    GitExecutor,
    ProcessResult,
    build_git_env,
    classify_result,
    get_shadowgit_path,
    is_tracked,
    not_tracked_failure,
    redact_paths,
)

__all__ = [
    # Protocols
    "ICommandAuthorizer",
    "IGitExecutor",
    # Security
    "BLOCKED_ARGS",
    "SAFE_COMMANDS",
    "authorize",
    "find_blocked_arg",
    "sanitize_command",
    "split_command",
    # Executor
    "EMPTY_OUTPUT",
    "REDACTED",
    "SHADOWGIT_DIR",
    "GitExecutor",
    "ProcessResult",
    "build_git_env",
    "classify_result",
    "get_shadowgit_path",
    "is_tracked",
    "not_tracked_failure",
    "redact_paths",
]
