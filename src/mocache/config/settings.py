"""Cache settings loaded from an optional YAML file and the environment."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

ENV_PREFIX = "MOCACHE_"
CONFIG_ENV = f"{ENV_PREFIX}CONFIG"

# Environment variable suffix -> settings field.
_ENV_FIELDS: Mapping[str, str] = {
    "STORE_PATH": "store_path",
    "TTL": "ttl",
    "PREFIX": "prefix",
    "ENABLE": "enable",
    "RELOAD_ON_MISS": "reload_on_miss",
    "TIMEOUT": "timeout",
    "LOCALE_DIR": "locale_directory",
    "DOMAIN": "default_domain",
}


class ConfigurationError(ValueError):
    """Raised when cache settings are missing or invalid."""


class CacheSettings(BaseModel):
    """Validated settings controlling which cache backend is created."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    store_path: Path | None = None
    ttl: int = Field(default=0, ge=0)
    prefix: str = Field(default="mo_", min_length=1)
    enable: bool = True
    reload_on_miss: bool = True
    timeout: float = Field(default=30.0, gt=0)
    locale_directory: Path | None = None
    default_domain: str = Field(default="messages", min_length=1)

    @field_validator("store_path", "locale_directory", mode="before")
    @classmethod
    def _blank_path_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def shared(self) -> bool:
        """Return ``True`` when a shared store is configured."""

        return self.store_path is not None


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except OSError as exc:
        raise ConfigurationError(f"Unable to read settings file {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Settings file {path} is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError("Settings file must define a mapping at the top level")
    return data


def _environment_overrides(environ: Mapping[str, str]) -> dict[str, str]:
    overrides: dict[str, str] = {}
    for suffix, field in _ENV_FIELDS.items():
        value = environ.get(ENV_PREFIX + suffix)
        if value is None:
            continue
        if not value.strip() and field not in {"store_path", "locale_directory"}:
            logger.warning("Ignoring empty value for %s", ENV_PREFIX + suffix)
            continue
        overrides[field] = value.strip()
    return overrides


def load_settings(
    path: str | os.PathLike[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> CacheSettings:
    """Build settings from ``path`` (or ``MOCACHE_CONFIG``) and the environment.

    Environment variables take precedence over values from the file.
    """

    environment = os.environ if environ is None else environ
    config_path = path if path is not None else environment.get(CONFIG_ENV)

    raw: dict[str, Any] = {}
    if config_path:
        raw.update(_load_yaml(Path(config_path)))
    raw.update(_environment_overrides(environment))

    try:
        return CacheSettings.model_validate(raw)
    except ValidationError as error:
        raise ConfigurationError(f"Settings validation failed: {error}") from error


def catalog_path(settings: CacheSettings, locale: str, domain: str) -> Path | None:
    """Return the ``.mo`` file for ``locale``/``domain`` when one is installed."""

    if settings.locale_directory is None:
        return None
    candidate = settings.locale_directory / locale / "LC_MESSAGES" / f"{domain}.mo"
    return candidate if candidate.is_file() else None


__all__ = [
    "CONFIG_ENV",
    "CacheSettings",
    "ConfigurationError",
    "ENV_PREFIX",
    "catalog_path",
    "load_settings",
]
