"""HTTP client for the Wikibase action API."""

from __future__ import annotations

import asyncio
from itertools import batched
from logging import getLogger
from typing import TYPE_CHECKING, Any

from reconcile_edit.adapters.http_resilience import ResilientClient

from .schema import GetEntitiesResponse, SearchEntitiesResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from reconcile_edit.config.wikibase import HttpClientConfig, WikibaseConfig

    from .schema import ApiResponse, SearchResult

log = getLogger(__name__)

# wbgetentities accepts at most 50 ids for regular clients
MAX_IDS_PER_REQUEST = 50


class WikibaseAPIError(RuntimeError):
    """Raised when the Wikibase API returns an error or an unexpected payload."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


def should_cache_payload(payload: object) -> bool:
    return not (isinstance(payload, dict) and "error" in payload)


class WikibaseClient:
    """Low-level client for the ``wbgetentities`` and ``wbsearchentities`` modules."""

    def __init__(
        self,
        *,
        config: WikibaseConfig,
        client_factory: Callable[[HttpClientConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._http = config.http
        self._client_factory = client_factory or ResilientClient

    def get_property_datatypes(self, property_ids: Sequence[str]) -> dict[str, str | None]:
        """Return each property's datatype, ``None`` for properties that do not exist."""

        return asyncio.run(self._get_property_datatypes_async(property_ids))

    def search_properties(self, labels: Sequence[str]) -> dict[str, list[SearchResult]]:
        """Return the property search hits for every label, in the configured language."""

        return asyncio.run(self._search_properties_async(labels))

    async def _get_property_datatypes_async(
        self,
        property_ids: Sequence[str],
    ) -> dict[str, str | None]:
        datatypes: dict[str, str | None] = {}
        async with self._client_factory(self._http) as client:
            for chunk in batched(property_ids, MAX_IDS_PER_REQUEST):
                response = await self._perform_request(
                    client=client,
                    params={"action": "wbgetentities", "ids": "|".join(chunk), "props": "datatype"},
                    model=GetEntitiesResponse,
                )
                for property_id in chunk:
                    info = response.entities.get(property_id)
                    datatypes[property_id] = (
                        None if info is None or info.is_missing else info.datatype
                    )
        return datatypes

    async def _search_properties_async(
        self,
        labels: Sequence[str],
    ) -> dict[str, list[SearchResult]]:
        results: dict[str, list[SearchResult]] = {}
        async with self._client_factory(self._http) as client:
            for label in labels:
                response = await self._perform_request(
                    client=client,
                    params={
                        "action": "wbsearchentities",
                        "search": label,
                        "type": "property",
                        "language": self._config.language,
                        "strictlanguage": "1",
                        "limit": str(self._config.search_limit),
                    },
                    model=SearchEntitiesResponse,
                )
                results[label] = response.search
        return results

    async def _perform_request[TResponse: ApiResponse](
        self,
        *,
        client: ResilientClient,
        params: dict[str, str],
        model: type[TResponse],
    ) -> TResponse:
        log.debug("Wikibase %s request: %s", params["action"], params)
        response = await client.get(self._config.api_url, params={**params, "format": "json"})
        response.raise_for_status()

        payload: Any = response.json()
        if not isinstance(payload, dict):
            raise WikibaseAPIError("Unexpected Wikibase response payload")

        parsed = model.model_validate(payload)
        if parsed.error is not None:
            raise WikibaseAPIError(
                parsed.error.info or parsed.error.code,
                code=parsed.error.code,
            )
        return parsed
