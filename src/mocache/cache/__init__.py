"""Translation cache backends sharing :class:`CacheInterface`."""

from .base import CacheInterface
from .factory import create_cache, open_store
from .memory import InMemoryCache
from .shared import DEFAULT_PREFIX, LOADED_KEY, SharedCache
from .store import SQLiteStore, StorageError

__all__ = [
    "CacheInterface",
    "DEFAULT_PREFIX",
    "InMemoryCache",
    "LOADED_KEY",
    "SQLiteStore",
    "SharedCache",
    "StorageError",
    "create_cache",
    "open_store",
]
