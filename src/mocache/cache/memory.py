"""Process-local cache used when no shared store is configured."""

from __future__ import annotations

from typing import Mapping

from mocache.catalog import MoParser

from .base import CacheInterface


class InMemoryCache(CacheInterface):
    """Dictionary-backed cache populated from the catalogue on construction."""

    def __init__(self, parser: MoParser) -> None:
        self._translations: dict[str, str] = {}
        parser.parse_into_cache(self)

    def get(self, msgid: str) -> str:
        return self._translations.get(msgid, msgid)

    def set(self, msgid: str, msgstr: str) -> None:
        self._translations[msgid] = msgstr

    def has(self, msgid: str) -> bool:
        return msgid in self._translations

    def set_all(self, translations: Mapping[str, str]) -> None:
        self._translations.update(translations)


__all__ = ["InMemoryCache"]
