"""
types.py - Result types shared by the authorizer, executor and tool server.

Verdicts and outcomes are plain values. Denials and execution failures are
normal results rendered to text for the assistant, never exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FailureKind(str, Enum):
    """Every way a tool call can fail without crashing the server."""

    USAGE_ERROR = "UsageError"
    REPOSITORY_NOT_FOUND = "RepositoryNotFound"
    NOT_TRACKED = "NotTracked"
    COMMAND_DENIED = "CommandDenied"
    EXECUTABLE_MISSING = "ExecutableMissing"
    TIMEOUT = "Timeout"
    OUTPUT_TOO_LARGE = "OutputTooLarge"
    TOOL_ERROR = "ToolError"
    UNKNOWN_EXECUTION_ERROR = "UnknownExecutionError"


@dataclass(frozen=True, slots=True)
class Allowed:
    """The command passed every check. `command` is the sanitized form."""

    command: str

    @property
    def allowed(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class Denied:
    """The command was rejected; `reason` is shown to the caller."""

    reason: str

    @property
    def allowed(self) -> bool:
        return False


AuthorizationVerdict = Allowed | Denied


@dataclass(frozen=True, slots=True)
class Success:
    output: str

    @property
    def ok(self) -> bool:
        return True

    def render(self) -> str:
        return self.output


@dataclass(frozen=True, slots=True)
class Failure:
    kind: FailureKind
    message: str

    @property
    def ok(self) -> bool:
        return False

    def render(self) -> str:
        return self.message


ExecutionOutcome = Success | Failure


__all__ = [
    "Allowed",
    "AuthorizationVerdict",
    "Denied",
    "ExecutionOutcome",
    "Failure",
    "FailureKind",
    "Success",
]
