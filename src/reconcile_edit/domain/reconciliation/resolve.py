"""Find the base record for an edit.

Candidates come from the external link index, which is only a coarse filter: every
candidate record is loaded and kept only if one of its value snaks on the identifying
property has exactly the identifying literal.

Matching policy:
- no match -> ``NewBase`` with a freshly minted item id
- one match -> ``ExistingBase`` carrying the record's latest revision
- several matches -> ``AmbiguousMatch``
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from reconcile_edit.domain.errors import AmbiguousMatch, ConsistencyFault
from reconcile_edit.domain.model import Item, ItemId, value_snaks
from reconcile_edit.domain.ports import (
    ITEM_ID_KIND,
    ConcreteRevision,
    MissingRecord,
    RedirectedRecord,
)

from .contracts import ExistingBase, NewBase

if TYPE_CHECKING:
    from reconcile_edit.domain.model import PropertyId
    from reconcile_edit.domain.ports import (
        EntityIdLookup,
        ExternalLinkIndex,
        IdGenerator,
        RevisionLookup,
    )

    from .contracts import Base

log = getLogger(__name__)


@dataclass(slots=True)
class ReconciliationService:
    """Resolve an identifying property/value pair to the record it designates."""

    links: ExternalLinkIndex
    entity_ids: EntityIdLookup
    revisions: RevisionLookup
    id_generator: IdGenerator
    item_id_kind: str = ITEM_ID_KIND

    def resolve(self, identifying_property: PropertyId, identifying_value: str) -> Base:
        matches = self.find_matches(identifying_property, identifying_value)

        if not matches:
            item_id = ItemId.from_number(self.id_generator.new_id(self.item_id_kind))
            log.info(
                "No record has %s=%r, creating %s",
                identifying_property,
                identifying_value,
                item_id,
            )
            return NewBase(record=Item(id=item_id))

        if len(matches) == 1:
            found = matches[0]
            log.info(
                "Matched %s at revision %s for %s=%r",
                found.record.id,
                found.revision_id,
                identifying_property,
                identifying_value,
            )
            return ExistingBase(record=found.record, revision_id=found.revision_id)

        matched_ids = [match.record.id for match in matches if match.record.id is not None]
        raise AmbiguousMatch(identifying_value, matched_ids)

    def find_matches(
        self,
        identifying_property: PropertyId,
        identifying_value: str,
    ) -> list[ConcreteRevision]:
        """Return the latest revision of every record holding the identifying value.

        A record is returned once even if several of its statements match.
        """

        matches: list[ConcreteRevision] = []
        for item_id in self._candidate_items(identifying_value):
            revision = self._load(item_id)
            if has_value(revision.record, identifying_property, identifying_value):
                matches.append(revision)
            else:
                log.debug("Candidate %s has no exact %s match", item_id, identifying_property)
        return matches

    def _candidate_items(self, identifying_value: str) -> list[ItemId]:
        item_ids: list[ItemId] = []
        for page in sorted(self.links.candidates_for(identifying_value)):
            entity_id = self.entity_ids.entity_id_for(page)
            if not isinstance(entity_id, ItemId):
                log.debug("Skipping page %s: not an item (%s)", page, entity_id)
                continue
            if entity_id not in item_ids:
                item_ids.append(entity_id)
        return item_ids

    def _load(self, item_id: ItemId) -> ConcreteRevision:
        result = self.revisions.latest_revision(item_id)
        match result:
            case ConcreteRevision():
                return result
            case RedirectedRecord(source=source, target=target):
                raise ConsistencyFault(
                    f"Link index points at {source}, which redirects to {target}"
                )
            case MissingRecord(item_id=missing):
                raise ConsistencyFault(f"Link index points at {missing}, which does not exist")


def has_value(record: Item, property_id: PropertyId, literal: str) -> bool:
    return any(
        snak.value.literal == literal for snak in value_snaks(record.statements_for(property_id))
    )
