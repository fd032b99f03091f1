"""Core indexing and container modules for namedarray."""

__all__ = [
    "allocator",
    "array",
    "axes",
    "config",
    "exceptions",
    "index",
    "ops",
    "shape_checker",
    "stats",
]
