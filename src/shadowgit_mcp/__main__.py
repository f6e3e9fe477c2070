"""Allow `python -m shadowgit_mcp`."""

from .cli import main

main()
