"""WSGI entrypoint for the cache inspection service."""

from mocache.app import create_app

application = create_app()
