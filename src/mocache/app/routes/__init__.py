"""Blueprint registrations for application routes."""

from flask import Flask

from .cache import blueprint as cache_blueprint


def register_routes(app: Flask) -> None:
    """Register all Flask blueprints with the provided application."""

    app.register_blueprint(cache_blueprint)
