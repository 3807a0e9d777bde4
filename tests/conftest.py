"""Test configuration utilities and shared fixtures."""

import struct
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Mapping

# Ensure the ``src`` directory is importable when tests are executed without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from mocache.app import create_app  # noqa: E402
from mocache.cache import SQLiteStore  # noqa: E402
from mocache.config import CacheSettings  # noqa: E402

HEADER = (
    "Content-Type: text/plain; charset=UTF-8\n"
    "Plural-Forms: nplurals=3; plural=(n==1) ? 0 : (n>=2 && n<=4) ? 1 : 2;\n"
)

PLURAL_MSGID = "%d pig went to the market\n\0%d pigs went to the market\n"

LITTLE_CATALOG: Mapping[str, str] = {
    "": HEADER,
    PLURAL_MSGID: "%d prase šlo na trh\n\0%d prasata šla na trh\n\0%d prasat šlo na trh\n",
    "Column": "Pole",
    "Table": "Tabulka",
}


def build_mo(
    entries: Mapping[str, str],
    *,
    byteorder: str = "<",
    encoding: str = "utf-8",
    revision: int = 0,
) -> bytes:
    """Serialise ``entries`` the way ``msgfmt`` lays out a catalogue."""

    items = sorted(
        (msgid.encode(encoding), msgstr.encode(encoding)) for msgid, msgstr in entries.items()
    )
    count = len(items)
    originals_offset = 28
    translations_offset = originals_offset + 8 * count
    data_offset = translations_offset + 8 * count

    data = b""
    originals: list[tuple[int, int]] = []
    translations: list[tuple[int, int]] = []
    for msgid, _ in items:
        originals.append((len(msgid), data_offset + len(data)))
        data += msgid + b"\0"
    for _, msgstr in items:
        translations.append((len(msgstr), data_offset + len(data)))
        data += msgstr + b"\0"

    header = struct.pack(
        f"{byteorder}7I",
        0x950412DE,
        revision,
        count,
        originals_offset,
        translations_offset,
        0,
        data_offset,
    )
    tables = b"".join(
        struct.pack(f"{byteorder}2I", length, offset) for length, offset in originals + translations
    )
    return header + tables + data


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.current = start

    def advance(self, delta: timedelta) -> None:
        self.current += delta

    def __call__(self) -> datetime:
        return self.current


@pytest.fixture()
def write_mo(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper writing a catalogue below ``tmp_path``."""

    def _write(entries: Mapping[str, str], name: str = "messages.mo", **options) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(build_mo(entries, **options))
        return path

    return _write


@pytest.fixture()
def little_mo(write_mo: Callable[..., Path]) -> Path:
    return write_mo(LITTLE_CATALOG, name="little.mo")


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, tzinfo=timezone.utc))


@pytest.fixture()
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "cache.db"


@pytest.fixture()
def store(store_path: Path, clock: FakeClock) -> SQLiteStore:
    return SQLiteStore(store_path, clock=clock)


@pytest.fixture()
def locale_directory(tmp_path: Path) -> Path:
    """Install the little catalogue as ``cs/LC_MESSAGES/messages.mo``."""

    root = tmp_path / "locale"
    target = root / "cs" / "LC_MESSAGES" / "messages.mo"
    target.parent.mkdir(parents=True)
    target.write_bytes(build_mo(LITTLE_CATALOG))
    return root


@pytest.fixture()
def settings(store_path: Path, locale_directory: Path) -> CacheSettings:
    return CacheSettings(store_path=store_path, locale_directory=locale_directory)


@pytest.fixture()
def app(settings: CacheSettings) -> Flask:
    """Return a configured Flask application for integration tests."""

    application = create_app(settings)
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()
