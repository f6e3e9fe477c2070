"""
execution/executor.py
Runs authorized git commands against a ShadowGit snapshot store.

git is pointed at the repository's private `.shadowgit.git` directory via
GIT_DIR/GIT_WORK_TREE, so queries read ShadowGit's snapshot history and never
touch the user's own `.git`.

Boundaries enforced here:
- wall-clock timeout (process is killed on expiry)
- captured output cap (reported, never silently truncated)
- argument vector passed straight to exec, no shell

Usage:
    executor = GitExecutor(timeout_ms=10_000)
    outcome = await executor.run("log --oneline -5", "/Users/alex/my-app")
"""

from __future__ import annotations

import asyncio
import os
import re
import signal
from collections.abc import Mapping
from dataclasses import dataclass

import structlog

from ..config.settings import DEFAULT_MAX_OUTPUT_BYTES, DEFAULT_TIMEOUT_MS
from ..types import ExecutionOutcome, Failure, FailureKind, Success
from .security import split_command

log = structlog.get_logger("shadowgit.executor")

SHADOWGIT_DIR = ".shadowgit.git"
EMPTY_OUTPUT = "(empty output)"
REDACTED = "***REDACTED***"
MAX_ERROR_LENGTH = 500

# git's exit status for fatal errors (bad revision, not a repository, ...)
GIT_FATAL_EXIT = 128

_READ_CHUNK = 64 * 1024
_KILL_GRACE_SECONDS = 2.0

_ABSOLUTE_PATH = re.compile(
    r"(?:(?<![\w.~/-])/|\b[A-Za-z]:\\|\\\\)[^\s'\"`]+"
)


class OutputLimitExceeded(Exception):
    """Raised while reading when a stream grows past the configured cap."""

    def __init__(self, limit: int) -> None:
        super().__init__(f"output exceeded {limit} bytes")
        self.limit = limit


@dataclass(slots=True)
class ProcessResult:
    """What a finished git process left behind."""

    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""


def get_shadowgit_path(location: str) -> str:
    return os.path.join(location, SHADOWGIT_DIR)


def is_tracked(location: str) -> bool:
    """True if `location` holds a ShadowGit private store."""
    return os.path.isdir(get_shadowgit_path(location))


def build_git_env(location: str, base: Mapping[str, str] | None = None) -> dict[str, str]:
    """Copy of the environment with git redirected to the private store."""
    env = dict(os.environ if base is None else base)
    env["GIT_DIR"] = get_shadowgit_path(location)
    env["GIT_WORK_TREE"] = location
    return env


def redact_paths(text: str) -> str:
    """Replace absolute-path-looking substrings with a placeholder."""
    return _ABSOLUTE_PATH.sub(REDACTED, text)


def truncate(text: str, limit: int = MAX_ERROR_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "... (truncated)"


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _format_seconds(timeout_ms: int) -> str:
    return f"{timeout_ms / 1000:g}"


def not_tracked_failure(location: str) -> Failure:
    return Failure(
        FailureKind.NOT_TRACKED,
        f"Error: No ShadowGit repository found at {location}\n\n"
        f"The directory exists but doesn't have a {SHADOWGIT_DIR} folder.\n"
        "This repository may not be tracked by ShadowGit yet.",
    )


def timeout_failure(timeout_ms: int) -> Failure:
    return Failure(
        FailureKind.TIMEOUT,
        f"Error: Command timed out after {timeout_ms} ms "
        f"({_format_seconds(timeout_ms)} second limit).",
    )


def classify_result(result: ProcessResult, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> ExecutionOutcome:
    """Map a finished process onto an ExecutionOutcome."""
    if result.returncode == 0:
        output = _decode(result.stdout)
        return Success(output if output else EMPTY_OUTPUT)

    # Negative return codes mean "killed by signal"; SIGTERM is how a
    # time-limited run ends.
    if result.returncode == -signal.SIGTERM:
        return timeout_failure(timeout_ms)

    stderr = _decode(result.stderr).strip()

    if result.returncode == GIT_FATAL_EXIT:
        detail = stderr or f"exit status {GIT_FATAL_EXIT}"
        return Failure(FailureKind.TOOL_ERROR, f"Git error: {redact_paths(detail)}")

    detail = f"exit status {result.returncode}"
    if stderr:
        detail = f"{detail}: {stderr}"
    return Failure(
        FailureKind.UNKNOWN_EXECUTION_ERROR,
        truncate(f"Error executing git command: {redact_paths(detail)}"),
    )


async def _read_capped(stream: asyncio.StreamReader, limit: int) -> bytes:
    chunks: list[bytes] = []
    size = 0
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            break
        size += len(chunk)
        if size > limit:
            raise OutputLimitExceeded(limit)
        chunks.append(chunk)
    return b"".join(chunks)


async def _terminate(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
    try:
        await asyncio.wait_for(process.wait(), timeout=_KILL_GRACE_SECONDS)
    except TimeoutError:
        log.warning("git.kill_timeout", pid=process.pid)


class GitExecutor:
    """Runs sanitized git commands inside tracked repositories."""

    def __init__(
        self,
        git_executable: str = "git",
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
    ) -> None:
        self.git_executable = git_executable
        self.timeout_ms = timeout_ms
        self.max_output_bytes = max_output_bytes

    async def run(self, command: str, location: str) -> ExecutionOutcome:
        """Run an already-authorized command in `location`.

        Args:
            command: Sanitized command, without the leading "git"
            location: Resolved repository location

        Returns:
            Success with stdout, or Failure with a redacted message
        """
        if not is_tracked(location):
            return not_tracked_failure(location)

        args = split_command(command)
        log.info("git.running", args=args, cwd=location)

        try:
            process = await asyncio.create_subprocess_exec(
                self.git_executable,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=location,
                env=build_git_env(location),
            )
        except FileNotFoundError:
            log.error("git.not_found", executable=self.git_executable)
            return Failure(
                FailureKind.EXECUTABLE_MISSING, "Error: Git is not installed or not in PATH."
            )
        except OSError as e:
            log.error("git.spawn_failed", executable=self.git_executable, error=str(e))
            return Failure(
                FailureKind.UNKNOWN_EXECUTION_ERROR,
                truncate(f"Error executing git command: {redact_paths(str(e))}"),
            )

        try:
            stdout, stderr = await asyncio.wait_for(
                self._communicate(process),
                timeout=self.timeout_ms / 1000,
            )
        except TimeoutError:
            await _terminate(process)
            log.warning("git.timeout", args=args, timeout_ms=self.timeout_ms)
            return timeout_failure(self.timeout_ms)
        except OutputLimitExceeded:
            await _terminate(process)
            log.warning("git.output_too_large", args=args, limit=self.max_output_bytes)
            return Failure(
                FailureKind.OUTPUT_TOO_LARGE,
                f"Error: Command output exceeded the {self._limit_label()} limit. "
                "Narrow the query (for example with -n, a path, or a revision range).",
            )

        result = ProcessResult(process.returncode, stdout, stderr)
        log.info("git.complete", args=args, returncode=result.returncode)
        return classify_result(result, self.timeout_ms)

    async def _communicate(self, process: asyncio.subprocess.Process) -> tuple[bytes, bytes]:
        stdout_task = asyncio.ensure_future(_read_capped(process.stdout, self.max_output_bytes))
        stderr_task = asyncio.ensure_future(_read_capped(process.stderr, self.max_output_bytes))
        try:
            stdout, stderr = await asyncio.gather(stdout_task, stderr_task)
            await process.wait()
        finally:
            stdout_task.cancel()
            stderr_task.cancel()
        return stdout, stderr

    def _limit_label(self) -> str:
        mib = self.max_output_bytes / (1024 * 1024)
        if mib >= 1:
            return f"{mib:g} MB"
        return f"{self.max_output_bytes} byte"


__all__ = [
    "EMPTY_OUTPUT",
    "GIT_FATAL_EXIT",
    "GitExecutor",
    "MAX_ERROR_LENGTH",
    "OutputLimitExceeded",
    "ProcessResult",
    "REDACTED",
    "SHADOWGIT_DIR",
    "build_git_env",
    "classify_result",
    "get_shadowgit_path",
    "is_tracked",
    "not_tracked_failure",
    "redact_paths",
    "timeout_failure",
    "truncate",
]
