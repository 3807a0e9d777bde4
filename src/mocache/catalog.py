"""Decoder for compiled gettext catalogues (``.mo`` files)."""

from __future__ import annotations

import os
import re
import struct
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - only for static type checkers
    from mocache.cache.base import CacheInterface

LE_MAGIC = 0x950412DE
BE_MAGIC = 0xDE120495
HEADER_SIZE = 28
DEFAULT_ENCODING = "utf-8"

_CHARSET_PATTERN = re.compile(rb"charset=([A-Za-z0-9_.:-]+)", re.IGNORECASE)


class FormatError(ValueError):
    """Raised when a catalogue file is missing, unreadable or malformed."""

    def __init__(self, path: str | None, message: str) -> None:
        super().__init__(f"{message}: {path}" if path else message)
        self.path = path


class MoParser:
    """Parse a binary gettext catalogue into an ordered msgid mapping.

    A parser built without a path represents "no catalogue configured" and
    always produces an empty mapping. Plural groups are returned exactly as
    stored, with forms joined by ``\\0``.
    """

    def __init__(
        self,
        path: str | os.PathLike[str] | None,
        *,
        encoding: str | None = None,
    ) -> None:
        self._path = os.fspath(path) if path is not None else None
        self._encoding = encoding

    @property
    def path(self) -> str | None:
        return self._path

    def parse(self) -> dict[str, str]:
        """Return the catalogue entries in table order."""

        if self._path is None:
            return {}

        try:
            data = Path(self._path).read_bytes()
        except OSError as exc:
            raise FormatError(self._path, "Unable to read catalogue") from exc

        return self._decode(data)

    def parse_into_cache(self, cache: CacheInterface) -> None:
        """Decode the catalogue and store every entry in ``cache`` at once."""

        cache.set_all(self.parse())

    def lookup(self, msgid: str) -> str | None:
        """Return the translation stored for ``msgid`` or ``None`` when absent."""

        return self.parse().get(msgid)

    def _decode(self, data: bytes) -> dict[str, str]:
        if len(data) < HEADER_SIZE:
            raise FormatError(self._path, "Catalogue is too short")

        (magic,) = struct.unpack("<I", data[:4])
        if magic == LE_MAGIC:
            order = "<"
        elif magic == BE_MAGIC:
            order = ">"
        else:
            raise FormatError(self._path, f"Bad magic number {magic:#010x}")

        revision, count, originals, translations = struct.unpack(
            f"{order}4I", data[4:20]
        )
        if revision >> 16 not in (0, 1):
            raise FormatError(self._path, f"Unsupported revision {revision >> 16}")

        raw: list[tuple[bytes, bytes]] = []
        for index in range(count):
            msgid = self._read_string(data, order, originals + index * 8)
            msgstr = self._read_string(data, order, translations + index * 8)
            raw.append((msgid, msgstr))

        encoding = self._encoding or _header_charset(raw) or DEFAULT_ENCODING
        catalog: dict[str, str] = {}
        try:
            for msgid, msgstr in raw:
                catalog[msgid.decode(encoding)] = msgstr.decode(encoding)
        except (UnicodeDecodeError, LookupError) as exc:
            raise FormatError(self._path, f"Unable to decode strings as {encoding}") from exc
        return catalog

    def _read_string(self, data: bytes, order: str, table_offset: int) -> bytes:
        if table_offset + 8 > len(data):
            raise FormatError(self._path, "String table exceeds file size")
        length, offset = struct.unpack(f"{order}2I", data[table_offset : table_offset + 8])
        if offset + length > len(data):
            raise FormatError(self._path, "String data exceeds file size")
        return data[offset : offset + length]


def _header_charset(entries: list[tuple[bytes, bytes]]) -> str | None:
    for msgid, msgstr in entries:
        if msgid == b"":
            match = _CHARSET_PATTERN.search(msgstr)
            return match.group(1).decode("ascii") if match else None
    return None


__all__ = ["BE_MAGIC", "FormatError", "LE_MAGIC", "MoParser"]
