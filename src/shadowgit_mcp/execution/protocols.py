"""
execution/protocols.py
Protocol definitions for execution module.

The tool server depends on these rather than on the concrete classes so
tests can substitute fakes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..types import AuthorizationVerdict, ExecutionOutcome


@runtime_checkable
class IGitExecutor(Protocol):
    """Protocol for running an authorized git command in a location."""

    async def run(self, command: str, location: str) -> ExecutionOutcome: ...


@runtime_checkable
class ICommandAuthorizer(Protocol):
    """Protocol for deciding whether a raw command may run."""

    def __call__(self, command: str, max_length: int = ...) -> AuthorizationVerdict: ...


__all__ = ["ICommandAuthorizer", "IGitExecutor"]
