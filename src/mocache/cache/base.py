"""Contract shared by every translation cache backend."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping


class CacheInterface(ABC):
    """Storage for msgid to msgstr lookups.

    ``get`` never fails for a missing identifier: the identifier itself is
    the untranslated result.
    """

    @abstractmethod
    def get(self, msgid: str) -> str:
        """Return the translation for ``msgid``, defaulting to ``msgid``."""

    @abstractmethod
    def set(self, msgid: str, msgstr: str) -> None:
        """Store ``msgstr`` for ``msgid``, replacing any existing value."""

    @abstractmethod
    def has(self, msgid: str) -> bool:
        """Report whether a translation is currently stored for ``msgid``."""

    @abstractmethod
    def set_all(self, translations: Mapping[str, str]) -> None:
        """Store every entry of ``translations``."""


__all__ = ["CacheInterface"]
