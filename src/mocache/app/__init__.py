"""Application factory for the cache inspection service."""

from __future__ import annotations

import logging
from importlib import metadata

from flask import Flask, jsonify

from mocache.cache import open_store
from mocache.config import CacheSettings, load_settings

from .errors import register_error_handlers
from .routes import register_routes
from .routes.cache import SETTINGS_KEY, STORE_EXTENSION

logger = logging.getLogger(__name__)


def _installed_version() -> str | None:
    try:
        return metadata.version("mocache")
    except metadata.PackageNotFoundError:
        return None


def create_app(settings: CacheSettings | None = None) -> Flask:
    """Create and configure the Flask application instance."""

    app = Flask(__name__)

    resolved = settings if settings is not None else load_settings()
    app.config[SETTINGS_KEY] = resolved
    if resolved.shared:
        app.extensions[STORE_EXTENSION] = open_store(resolved)
    else:
        logger.warning("No shared store configured; cache endpoints will return 404")

    register_routes(app)
    register_error_handlers(app)

    @app.route("/health", methods=["GET"])
    def health_check():
        """Report liveness, the installed version and whether a store is shared."""

        return jsonify(
            {"status": "ok", "version": _installed_version(), "shared_store": resolved.shared}
        )

    return app


__all__ = ["create_app"]
