"""Integration tests for the health check endpoint."""

from __future__ import annotations

from importlib import metadata

import pytest
from flask.testing import FlaskClient

from mocache.app import create_app
from mocache.config import CacheSettings


def test_health_endpoint_reports_installed_version(
    client: FlaskClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(metadata, "version", lambda package: "1.2.3")

    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json() == {"status": "ok", "version": "1.2.3", "shared_store": True}


def test_health_endpoint_from_source_checkout(
    client: FlaskClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    def not_installed(_: str) -> str:
        raise metadata.PackageNotFoundError

    monkeypatch.setattr(metadata, "version", not_installed)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json()["version"] is None


def test_health_endpoint_without_shared_store() -> None:
    app = create_app(CacheSettings())
    app.config.update(TESTING=True)

    response = app.test_client().get("/health")

    assert response.status_code == 200
    assert response.get_json()["shared_store"] is False
