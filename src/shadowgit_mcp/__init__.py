# shadowgit-mcp package

# importlib.metadata.version() is slow; defer until actually needed

_cached_version: str | None = None


def _get_version() -> str:
    """Lazy version lookup - called on first access."""
    global _cached_version
    if _cached_version is None:
        from importlib.metadata import version, PackageNotFoundError

        try:
            _cached_version = version("shadowgit-mcp")
        except PackageNotFoundError:
            _cached_version = "0.0.0-dev"
    return _cached_version


def __getattr__(name: str):
    """Lazy module attributes - defer expensive lookups."""
    if name == "__version__":
        return _get_version()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


SERVER_NAME = "shadowgit-mcp"

__all__ = ["SERVER_NAME", "__version__"]
