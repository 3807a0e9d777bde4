"""Unit coverage for backend selection."""

from __future__ import annotations

from pathlib import Path

import pytest

from mocache.cache import InMemoryCache, SharedCache, create_cache, open_store
from mocache.catalog import MoParser
from mocache.config import CacheSettings


def test_without_store_path_uses_memory_cache(little_mo: Path) -> None:
    cache = create_cache(MoParser(little_mo), "cs", "app", CacheSettings())

    assert isinstance(cache, InMemoryCache)
    assert cache.get("Column") == "Pole"


def test_with_store_path_uses_shared_cache(little_mo: Path, store_path: Path) -> None:
    settings = CacheSettings(store_path=store_path, ttl=120, prefix="tr_")

    cache = create_cache(MoParser(little_mo), "cs", "app", settings)

    assert isinstance(cache, SharedCache)
    assert cache.prefix == "tr_"
    assert cache.ttl == 120
    assert cache.store.fetch("tr_cs.app.Column") == (True, "Pole")


def test_disabled_eager_load_is_forwarded(little_mo: Path, store_path: Path) -> None:
    settings = CacheSettings(store_path=store_path, enable=False)

    cache = create_cache(MoParser(little_mo), "cs", "app", settings)

    assert isinstance(cache, SharedCache)
    assert cache.store.keys() == []


def test_open_store_requires_path() -> None:
    with pytest.raises(ValueError):
        open_store(CacheSettings())
