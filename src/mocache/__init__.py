"""Gettext catalogue lookups with an optional cache shared across processes."""

from .cache import CacheInterface, InMemoryCache, SharedCache, SQLiteStore, create_cache
from .catalog import FormatError, MoParser

__all__ = [
    "CacheInterface",
    "FormatError",
    "InMemoryCache",
    "MoParser",
    "SQLiteStore",
    "SharedCache",
    "create_cache",
]
