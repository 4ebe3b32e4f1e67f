"""Application configuration helpers."""

from __future__ import annotations

from .env import require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging
from .reconciliation import ReconcileConfig, get_reconcile_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config
from .wikibase import (
    HttpCacheConfig,
    HttpClientConfig,
    RetryPolicy,
    WikibaseConfig,
    get_wikibase_config,
    is_wikibase_configured,
)

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "HttpCacheConfig",
    "HttpClientConfig",
    "MissingConfigurationError",
    "ReconcileConfig",
    "RetryPolicy",
    "StorageConfig",
    "WikibaseConfig",
    "configure_logging",
    "get_database_config",
    "get_reconcile_config",
    "get_storage_config",
    "get_wikibase_config",
    "is_wikibase_configured",
    "require_env_vars",
]
