"""Select the cache backend matching the configured settings."""

from __future__ import annotations

from mocache.catalog import MoParser
from mocache.config import CacheSettings

from .base import CacheInterface
from .memory import InMemoryCache
from .shared import SharedCache
from .store import SQLiteStore


def open_store(settings: CacheSettings) -> SQLiteStore:
    """Open the shared store named by ``settings``."""

    if settings.store_path is None:
        raise ValueError("No shared store path configured")
    return SQLiteStore(settings.store_path, timeout=settings.timeout)


def create_cache(
    parser: MoParser,
    locale: str,
    domain: str,
    settings: CacheSettings,
) -> CacheInterface:
    """Return a shared cache when a store is configured, else an in-memory one."""

    if not settings.shared:
        return InMemoryCache(parser)

    return SharedCache(
        parser,
        locale,
        domain,
        settings.ttl,
        settings.enable,
        settings.prefix,
        store=open_store(settings),
        reload_on_miss=settings.reload_on_miss,
    )


__all__ = ["create_cache", "open_store"]
