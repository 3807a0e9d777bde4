"""Translation cache shared between processes through a common store."""

from __future__ import annotations

import logging
from typing import Mapping

from mocache.catalog import MoParser

from .base import CacheInterface
from .store import SQLiteStore

logger = logging.getLogger(__name__)

LOADED_KEY = "__TRANSLATIONS_LOADED__"
DEFAULT_PREFIX = "mo_"


class SharedCache(CacheInterface):
    """Cache whose entries live in a :class:`SQLiteStore` shared by processes.

    Keys follow ``{prefix}{locale}.{domain}.{msgid}``. A marker record under
    :data:`LOADED_KEY` signals that the whole catalogue has been loaded; it
    is written in the same transaction as the entries and with the same
    expiry. Loading and per-key reloading both go through
    :meth:`SQLiteStore.entry`, so concurrent callers never parse the same
    catalogue twice for one key.
    """

    LOADED_KEY = LOADED_KEY

    def __init__(
        self,
        parser: MoParser,
        locale: str,
        domain: str,
        ttl: int = 0,
        enable: bool = True,
        prefix: str = DEFAULT_PREFIX,
        *,
        store: SQLiteStore,
        reload_on_miss: bool = True,
    ) -> None:
        if ttl < 0:
            raise ValueError("ttl must not be negative")

        self._parser = parser
        self._store = store
        self._locale = locale
        self._domain = domain
        self._prefix = prefix
        self._ttl = ttl or None
        self._reload_on_miss = reload_on_miss
        self._namespace = f"{prefix}{locale}.{domain}."

        if enable:
            self.ensure_loaded()

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def domain(self) -> str:
        return self._domain

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def ttl(self) -> int:
        return self._ttl or 0

    @property
    def store(self) -> SQLiteStore:
        return self._store

    @property
    def marker_key(self) -> str:
        return self._namespace + LOADED_KEY

    def key_for(self, msgid: str) -> str:
        """Return the store key holding the translation of ``msgid``."""

        if msgid == LOADED_KEY:
            raise ValueError(f"{LOADED_KEY!r} is reserved for the loaded marker")
        return self._namespace + msgid

    def ensure_loaded(self) -> bool:
        """Bulk-load the catalogue unless the loaded marker is present.

        Expired records anywhere in the store are purged in the same
        transaction. Returns ``True`` only for the caller whose load
        actually ran.
        """

        if self._store.exists(self.marker_key):
            return False

        loaded: dict[str, str] | None = None

        def load() -> int:
            nonlocal loaded
            logger.debug("Loading catalogue %s into %s", self._parser.path, self._namespace)
            translations = self._parser.parse()
            if translations.pop(LOADED_KEY, None) is not None:
                logger.warning(
                    "Skipping msgid %r in %s; it is reserved for the loaded marker",
                    LOADED_KEY,
                    self._parser.path,
                )
            self._store.purge_expired()
            self.set_all(translations)
            loaded = translations
            return 1

        self._store.entry(self.marker_key, load, self._ttl)
        if loaded is None:
            return False
        logger.debug("Loaded %d entries into %s", len(loaded), self._namespace)
        return True

    def get(self, msgid: str) -> str:
        if msgid == LOADED_KEY:
            return msgid
        key = self.key_for(msgid)
        self.ensure_loaded()

        found, msgstr = self._store.fetch(key)
        if found and isinstance(msgstr, str):
            return msgstr
        if not self._reload_on_miss:
            return msgid
        return self.reload_on_miss(msgid)

    def reload_on_miss(self, msgid: str) -> str:
        """Resolve one identifier from the catalogue and store the outcome.

        An identifier unknown to the catalogue is stored as its own
        translation so repeated misses stay cheap.
        """

        def reload() -> str:
            logger.debug("Reloading %r for %s", msgid, self._namespace)
            msgstr = self._parser.lookup(msgid)
            return msgid if msgstr is None else msgstr

        msgstr = self._store.entry(self.key_for(msgid), reload, self._ttl)
        return msgstr if isinstance(msgstr, str) else msgid

    def set(self, msgid: str, msgstr: str) -> None:
        self._store.store(self.key_for(msgid), msgstr, self._ttl)

    def has(self, msgid: str) -> bool:
        return self._store.exists(self.key_for(msgid))

    def set_all(self, translations: Mapping[str, str]) -> None:
        self._store.store_many(
            {self.key_for(msgid): msgstr for msgid, msgstr in translations.items()},
            self._ttl,
        )

    def evict(self, msgid: str) -> bool:
        """Drop one entry; the next ``get`` resolves it through a reload."""

        return self._store.delete(self.key_for(msgid))

    def flush(self) -> int:
        """Delete every record in this locale/domain namespace."""

        removed = self._store.delete_prefix(self._namespace)
        logger.info("Flushed %d records from %s", removed, self._namespace)
        return removed


__all__ = ["DEFAULT_PREFIX", "LOADED_KEY", "SharedCache"]
