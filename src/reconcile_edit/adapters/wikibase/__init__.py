"""Read property metadata from a remote Wikibase."""

from __future__ import annotations

from .client import WikibaseAPIError, WikibaseClient, should_cache_payload
from .properties import WikibasePropertySource

__all__ = [
    "WikibaseAPIError",
    "WikibaseClient",
    "WikibasePropertySource",
    "should_cache_payload",
]
