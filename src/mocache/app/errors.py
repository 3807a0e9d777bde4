"""JSON error payloads for the inspection service."""

from __future__ import annotations

import logging
from http import HTTPStatus

from flask import Flask, Response, jsonify
from werkzeug.exceptions import BadRequest

from mocache.cache import StorageError
from mocache.catalog import FormatError

logger = logging.getLogger(__name__)


def problem(error: str, status: HTTPStatus, message: str) -> tuple[Response, HTTPStatus]:
    """Return the ``{"error", "message"}`` body every failing endpoint uses."""

    return jsonify({"error": error, "message": message}), status


def register_error_handlers(app: Flask) -> None:
    """Map request, catalogue and store failures onto status codes."""

    @app.errorhandler(BadRequest)
    def handle_bad_request(error: BadRequest):
        return problem("bad_request", HTTPStatus.BAD_REQUEST, error.description or "Invalid request")

    @app.errorhandler(ValueError)
    def handle_value_error(error: ValueError):
        return problem("validation_error", HTTPStatus.BAD_REQUEST, str(error))

    @app.errorhandler(FormatError)
    def handle_format_error(error: FormatError):
        return problem("catalog_format_error", HTTPStatus.UNPROCESSABLE_ENTITY, str(error))

    @app.errorhandler(StorageError)
    def handle_storage_error(error: StorageError):
        logger.error("Shared store failure: %s", error)
        return problem("storage_unavailable", HTTPStatus.SERVICE_UNAVAILABLE, str(error))


__all__ = ["problem", "register_error_handlers"]
