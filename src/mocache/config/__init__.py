"""Configuration helpers for cache backends."""

from .settings import (
    CONFIG_ENV,
    CacheSettings,
    ConfigurationError,
    catalog_path,
    load_settings,
)

__all__ = [
    "CONFIG_ENV",
    "CacheSettings",
    "ConfigurationError",
    "catalog_path",
    "load_settings",
]
