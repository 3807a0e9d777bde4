"""Command line helper that preloads catalogues into the shared store."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from mocache.cache import SharedCache, StorageError, open_store
from mocache.catalog import FormatError, MoParser
from mocache.config import CacheSettings, ConfigurationError, catalog_path, load_settings

logger = logging.getLogger(__name__)


def warm_locales(
    settings: CacheSettings,
    locales: Sequence[str],
    domain: str,
    *,
    flush: bool = False,
) -> dict[str, bool]:
    """Bulk-load each locale's catalogue and report which loads ran here."""

    store = open_store(settings)
    results: dict[str, bool] = {}
    for locale in locales:
        path = catalog_path(settings, locale, domain)
        if path is None:
            logger.warning("No catalogue installed for %s/%s", locale, domain)
        cache = SharedCache(
            MoParser(path),
            locale,
            domain,
            settings.ttl,
            False,
            settings.prefix,
            store=store,
        )
        if flush:
            cache.flush()
        results[locale] = cache.ensure_loaded()
    return results


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("locales", nargs="+", help="Locales to load, e.g. de pt_BR")
    parser.add_argument("--config", help="Path to a YAML settings file")
    parser.add_argument("--domain", help="Gettext domain (defaults to the configured one)")
    parser.add_argument("--flush", action="store_true", help="Drop existing entries first")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args.config)
        if not settings.shared:
            raise ConfigurationError("store_path must be configured to warm a shared cache")
        results = warm_locales(
            settings,
            args.locales,
            args.domain or settings.default_domain,
            flush=args.flush,
        )
    except (ConfigurationError, FormatError, StorageError) as error:
        print(f"error: {error}", file=sys.stderr)
        return 1

    for locale, loaded in results.items():
        print(f"{locale}: {'loaded' if loaded else 'already resident'}")
    return 0


__all__ = ["main", "warm_locales"]
