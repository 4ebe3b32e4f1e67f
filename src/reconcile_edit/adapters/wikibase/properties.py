"""Property datatype lookup and label resolution backed by a remote Wikibase."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError as PydanticValidationError

from reconcile_edit.domain.errors import (
    AmbiguousProperty,
    PropertyDatatypeLookupError,
    PropertyResolutionError,
)
from reconcile_edit.domain.model import PropertyId

from .client import WikibaseAPIError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .client import WikibaseClient

log = getLogger(__name__)

_REMOTE_ERRORS = (httpx.HTTPError, WikibaseAPIError, PydanticValidationError)


@dataclass(slots=True)
class WikibasePropertySource:
    """Implements both ``PropertyDatatypeLookup`` and ``PropertyLabelResolver``.

    Datatypes are memoized per instance; the HTTP cache takes care of reuse across
    instances.
    """

    client: WikibaseClient
    _datatypes: dict[PropertyId, str | None] = field(
        default_factory=dict[PropertyId, str | None], init=False, repr=False
    )

    def datatype_of(self, property_id: PropertyId) -> str | None:
        if property_id not in self._datatypes:
            try:
                found = self.client.get_property_datatypes([property_id.serialization])
            except _REMOTE_ERRORS as exc:
                log.warning("Datatype lookup for %s failed: %s", property_id, exc)
                raise PropertyDatatypeLookupError(property_id) from exc
            self._datatypes[property_id] = found.get(property_id.serialization)
        return self._datatypes[property_id]

    def ids_for_labels(self, labels: Sequence[str]) -> dict[str, PropertyId]:
        try:
            hits_by_label = self.client.search_properties(labels)
        except _REMOTE_ERRORS as exc:
            log.warning("Property label search failed: %s", exc)
            raise PropertyResolutionError(f"Property label search failed: {exc}") from exc

        resolved: dict[str, PropertyId] = {}
        for label, hits in hits_by_label.items():
            candidates: list[PropertyId] = []
            for hit in hits:
                if not hit.has_label(label) or not PropertyId.is_valid(hit.id):
                    continue
                property_id = PropertyId(hit.id)
                if property_id not in candidates:
                    candidates.append(property_id)
            if len(candidates) > 1:
                raise AmbiguousProperty(label, candidates)
            if candidates:
                resolved[label] = candidates[0]
        return resolved
