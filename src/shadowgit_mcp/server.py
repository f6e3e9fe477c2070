"""
server.py
ShadowGit MCP Server (Official SDK)

Architecture:
- Pure mcp.server.Server over stdio
- Two tools: list_repos() and git(repo, command)
- Every outcome, including denials and failures, is returned as text so the
  assistant always gets something actionable

Flow for git():
    resolve repo -> private store check -> authorize command -> run -> text
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from mcp.server import Server
from mcp.server.lowlevel import NotificationOptions
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool, ToolAnnotations

from . import SERVER_NAME, __version__
from .config.settings import ServerSettings
from .execution.executor import GitExecutor, is_tracked, not_tracked_failure
from .execution.protocols import ICommandAuthorizer, IGitExecutor
from .execution.security import authorize
from .registry import RepositoryRegistry
from .types import Denied, Failure, FailureKind
from .utils.path_safety import RepositoryResolver

log = structlog.get_logger("shadowgit.server")

GIT_TOOL_DESCRIPTION = """Execute read-only git commands on a specific ShadowGit repository.

IMPORTANT: You MUST specify which repository to query.
Use list_repos() first to see available repositories.

Example usage:
- git({repo: "shadowgit-app", command: "log --oneline -5"})
- git({repo: "/Users/alex/project", command: "diff HEAD~1 HEAD"})"""

LIST_REPOS_DESCRIPTION = (
    "List all available ShadowGit repositories. "
    "Call this first to discover available repositories."
)

USAGE_ERROR = """Error: Both 'repo' and 'command' parameters are required.

Example usage:
  git({repo: "my-project", command: "log --oneline -5"})

Use list_repos() to see available repositories."""

NO_REPOSITORIES = "No repositories found. Add repositories through the ShadowGit application."


def _text(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


def _string_arg(arguments: dict[str, Any], key: str) -> str | None:
    value = arguments.get(key)
    if not isinstance(value, str) or not value.strip():
        return None
    return value


class ShadowGitServer:
    """Tool handlers plus the MCP server they are registered on."""

    def __init__(
        self,
        registry: RepositoryRegistry,
        settings: ServerSettings,
        executor: IGitExecutor | None = None,
        authorizer: ICommandAuthorizer = authorize,
    ) -> None:
        self.registry = registry
        self.settings = settings
        self.resolver = RepositoryResolver(registry)
        self.executor = executor or GitExecutor(
            git_executable=settings.git_executable,
            timeout_ms=settings.timeout_ms,
            max_output_bytes=settings.max_output_bytes,
        )
        self._authorize = authorizer
        # One git process at a time
        self._exec_lock = asyncio.Lock()

        self.server = Server(SERVER_NAME)
        self._register_handlers()

    # --- MCP wiring ---

    def _register_handlers(self) -> None:
        @self.server.list_tools()
        async def handle_list_tools() -> list[Tool]:
            return self.list_tools()

        # Argument checking is ours: a missing field must come back as usage text
        @self.server.call_tool(validate_input=False)
        async def handle_call_tool(name: str, arguments: dict | None) -> list[TextContent]:
            return await self.call_tool(name, arguments)

    def list_tools(self) -> list[Tool]:
        read_only = ToolAnnotations(
            readOnlyHint=True,
            destructiveHint=False,
            idempotentHint=True,
            openWorldHint=False,
        )
        return [
            Tool(
                name="git",
                description=GIT_TOOL_DESCRIPTION,
                inputSchema={
                    "type": "object",
                    "properties": {
                        "repo": {
                            "type": "string",
                            "description": "Repository name (from list_repos) or full path - REQUIRED",
                        },
                        "command": {
                            "type": "string",
                            "description": "Git command to execute (read-only commands only) - REQUIRED",
                        },
                    },
                    "required": ["repo", "command"],
                },
                annotations=read_only,
            ),
            Tool(
                name="list_repos",
                description=LIST_REPOS_DESCRIPTION,
                inputSchema={"type": "object", "properties": {}},
                annotations=read_only,
            ),
        ]

    async def call_tool(self, name: str, arguments: dict | None) -> list[TextContent]:
        """Dispatch a tool call. Never raises; errors become text."""
        args = arguments or {}
        log.info("tool.call", tool=name)
        try:
            if name == "git":
                return _text(await self.handle_git(args))
            if name == "list_repos":
                return _text(await self.handle_list_repos())
            return _text(f"Unknown tool: {name}")
        except Exception as e:
            log.exception("tool.failed", tool=name)
            return _text(f"Error executing {name}: {e}")

    # --- Tools ---

    async def handle_list_repos(self) -> str:
        entries = self.registry.entries()
        if not entries:
            return NO_REPOSITORIES

        repo_list = [f"• {entry.name}\n  Path: {entry.location}" for entry in entries]
        return "Available ShadowGit repositories:\n\n" + "\n\n".join(repo_list)

    async def handle_git(self, arguments: dict[str, Any]) -> str:
        repo = _string_arg(arguments, "repo")
        command = _string_arg(arguments, "command")
        if repo is None or command is None:
            log.info("git.usage_error", fields=sorted(arguments))
            return Failure(FailureKind.USAGE_ERROR, USAGE_ERROR).render()

        location = self.resolver.resolve(repo)
        if location is None:
            return self._repository_not_found(repo).render()

        if not is_tracked(location):
            log.info("git.not_tracked", location=location)
            return not_tracked_failure(location).render()

        verdict = self._authorize(command, max_length=self.settings.max_command_length)
        if isinstance(verdict, Denied):
            log.info("git.denied", repo=repo, reason=verdict.reason.splitlines()[0])
            return Failure(FailureKind.COMMAND_DENIED, verdict.reason).render()

        async with self._exec_lock:
            outcome = await self.executor.run(verdict.command, location)

        if isinstance(outcome, Failure):
            log.info("git.failed", repo=repo, kind=outcome.kind.value)
        return outcome.render()

    def _repository_not_found(self, repo: str) -> Failure:
        # Names only; registered paths of unrelated repos stay private
        names = [name for name in self.registry.names() if not name.startswith("/")]
        available = ", ".join(names) or "(none)"
        return Failure(
            FailureKind.REPOSITORY_NOT_FOUND,
            f"Error: Repository '{repo}' not found.\n\n"
            f"Available repositories: {available}\n\n"
            "Use list_repos() for full details, or provide the full path to the repository.",
        )

    # --- Transport ---

    def initialization_options(self) -> InitializationOptions:
        return InitializationOptions(
            server_name=SERVER_NAME,
            server_version=__version__,
            capabilities=self.server.get_capabilities(
                notification_options=NotificationOptions(),
                experimental_capabilities={},
            ),
        )

    async def run_stdio(self) -> None:
        """Serve over stdin/stdout until the client disconnects."""
        async with stdio_server() as (read_stream, write_stream):
            log.info("server.started", repositories=len(self.registry))
            await self.server.run(read_stream, write_stream, self.initialization_options())


def create_server(settings: ServerSettings) -> ShadowGitServer:
    """Load the registry named by `settings` and build a server around it."""
    registry = RepositoryRegistry.load(settings.registry_path)
    return ShadowGitServer(registry, settings)


__all__ = ["NO_REPOSITORIES", "ShadowGitServer", "USAGE_ERROR", "create_server"]
