"""Configuration for reading property metadata from a remote Wikibase."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

import httpx

from .env import float_env_var, optional_env_var, require_env_vars
from .storage import StorageConfig, get_storage_config

DEFAULT_USER_AGENT = "reconcile-edit/0.1 (python-httpx)"
DEFAULT_LANGUAGE = "en"
DEFAULT_CACHE_TTL_SECONDS = 3600.0
WIKIBASE_TIMEOUT_SECONDS = 15.0
WIKIBASE_REQUESTS_PER_SECOND = 5

# maxlag and other API errors arrive as 200 responses and are not retried
RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})

type ShouldCacheHook = Callable[[object], bool]


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    total: int = 4
    backoff_factor: float = 0.5
    max_backoff_wait: float = 60.0
    status_forcelist: frozenset[int] = RETRY_STATUSES
    retry_on_exceptions: tuple[type[httpx.HTTPError], ...] = (
        httpx.TimeoutException,
        httpx.NetworkError,
        httpx.RemoteProtocolError,
    )


@dataclass(slots=True, frozen=True)
class HttpCacheConfig:
    """SQLite response cache; ``should_cache`` sees each decoded JSON body."""

    sqlite_path: str
    ttl_seconds: float | None = None
    should_cache: ShouldCacheHook | None = None


@dataclass(slots=True, frozen=True)
class HttpClientConfig:
    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = WIKIBASE_TIMEOUT_SECONDS
    requests_per_second: int | None = WIKIBASE_REQUESTS_PER_SECOND
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    cache: HttpCacheConfig | None = None


@dataclass(frozen=True, slots=True)
class WikibaseConfig:
    """Where the property source finds the ``api.php`` endpoint and how to call it."""

    api_url: str
    language: str = DEFAULT_LANGUAGE
    http: HttpClientConfig = field(default_factory=HttpClientConfig)
    search_limit: int = 50


def get_wikibase_config(
    *,
    storage: StorageConfig | None = None,
    cache_predicate: ShouldCacheHook | None = None,
) -> WikibaseConfig:
    values = require_env_vars(("WIKIBASE_API_URL",))
    storage_config = storage or get_storage_config()

    http = HttpClientConfig(
        user_agent=optional_env_var("WIKIBASE_USER_AGENT", DEFAULT_USER_AGENT)
        or DEFAULT_USER_AGENT,
        cache=HttpCacheConfig(
            sqlite_path=str(storage_config.http_cache_path()),
            ttl_seconds=float_env_var("WIKIBASE_CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS),
            should_cache=cache_predicate,
        ),
    )
    return WikibaseConfig(
        api_url=values["WIKIBASE_API_URL"],
        language=optional_env_var("WIKIBASE_LANGUAGE", DEFAULT_LANGUAGE) or DEFAULT_LANGUAGE,
        http=http,
    )


def is_wikibase_configured() -> bool:
    return optional_env_var("WIKIBASE_API_URL") is not None
