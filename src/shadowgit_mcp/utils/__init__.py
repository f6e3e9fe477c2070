"""
utils - Path safety helpers.

Modules:
- path_safety.py: traversal screen and repository identifier resolution
"""

from .path_safety import (
    PATH_TRAVERSAL_PATTERNS,
    RepositoryResolver,
    has_path_traversal,
    looks_like_path,
    normalize_path,
)

__all__ = [
    "PATH_TRAVERSAL_PATTERNS",
    "RepositoryResolver",
    "has_path_traversal",
    "looks_like_path",
    "normalize_path",
]
