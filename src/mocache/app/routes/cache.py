"""Endpoints for inspecting, warming and flushing shared cache namespaces."""

from __future__ import annotations

import logging
import re
from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import BadRequest

from mocache.cache import SharedCache, SQLiteStore
from mocache.catalog import MoParser
from mocache.config import CacheSettings, catalog_path

from ..errors import problem

blueprint = Blueprint("cache", __name__, url_prefix="/api/v1/cache")

logger = logging.getLogger(__name__)

_SLUG_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_@.-]*$")

STORE_EXTENSION = "mocache.store"
SETTINGS_KEY = "MOCACHE_SETTINGS"


def _validate_slug(value: str, *, field: str) -> None:
    if not _SLUG_PATTERN.match(value):
        raise ValueError(f"Invalid {field}: {value!r}")


def _required_msgid() -> str:
    msgid = request.args.get("msgid")
    if msgid is None:
        raise BadRequest("msgid is required")
    return msgid


def _namespace_cache(locale: str, domain: str) -> SharedCache | None:
    """Return a cache bound to the namespace without loading anything."""

    _validate_slug(locale, field="locale")
    _validate_slug(domain, field="domain")
    store: SQLiteStore | None = current_app.extensions.get(STORE_EXTENSION)
    if store is None:
        return None

    settings: CacheSettings = current_app.config[SETTINGS_KEY]
    return SharedCache(
        MoParser(catalog_path(settings, locale, domain)),
        locale,
        domain,
        settings.ttl,
        False,
        settings.prefix,
        store=store,
        reload_on_miss=settings.reload_on_miss,
    )


def _not_configured():
    return problem(
        "shared_store_not_configured",
        HTTPStatus.NOT_FOUND,
        "No shared cache store is configured",
    )


@blueprint.get("/<locale>/<domain>")
def namespace_status(locale: str, domain: str):
    """Describe the namespace without triggering a load."""

    cache = _namespace_cache(locale, domain)
    if cache is None:
        return _not_configured()

    keys = cache.store.keys(cache.namespace)
    payload = {
        "locale": locale,
        "domain": domain,
        "prefix": cache.prefix,
        "namespace": cache.namespace,
        "marker_key": cache.marker_key,
        "loaded": cache.marker_key in keys,
        "entries": sum(1 for key in keys if key != cache.marker_key),
        "ttl": cache.ttl,
    }
    return jsonify(payload), HTTPStatus.OK


@blueprint.get("/<locale>/<domain>/entries")
def inspect_entry(locale: str, domain: str):
    """Look up a single entry; a missing entry is reported, never reloaded."""

    msgid = _required_msgid()
    cache = _namespace_cache(locale, domain)
    if cache is None:
        return _not_configured()

    key = cache.key_for(msgid)
    found, value = cache.store.fetch(key)
    payload = {"msgid": msgid, "key": key, "present": found, "value": value if found else None}
    return jsonify(payload), HTTPStatus.OK


@blueprint.delete("/<locale>/<domain>/entries")
def evict_entry(locale: str, domain: str):
    """Drop one entry so the next lookup reloads it from the catalogue."""

    msgid = _required_msgid()
    cache = _namespace_cache(locale, domain)
    if cache is None:
        return _not_configured()

    removed = cache.evict(msgid)
    logger.info("Evicted %r from %s (present=%s)", msgid, cache.namespace, removed)
    return jsonify({"key": cache.key_for(msgid), "removed": removed}), HTTPStatus.OK


@blueprint.post("/<locale>/<domain>/warm")
def warm_namespace(locale: str, domain: str):
    """Bulk-load the installed catalogue unless it is already resident."""

    cache = _namespace_cache(locale, domain)
    if cache is None:
        return _not_configured()

    loaded = cache.ensure_loaded()
    logger.info("Warm request for %s (loaded=%s)", cache.namespace, loaded)
    return jsonify({"namespace": cache.namespace, "loaded": loaded}), HTTPStatus.OK


@blueprint.delete("/<locale>/<domain>")
def flush_namespace(locale: str, domain: str):
    """Remove every record in the namespace, including the loaded marker."""

    cache = _namespace_cache(locale, domain)
    if cache is None:
        return _not_configured()

    removed = cache.flush()
    return jsonify({"namespace": cache.namespace, "removed": removed}), HTTPStatus.OK
