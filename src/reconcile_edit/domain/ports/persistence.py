"""Ports for minting identifiers and persisting records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from reconcile_edit.domain.model import Item, ItemId
    from reconcile_edit.domain.ports.lookup import RevisionId

ITEM_ID_KIND = "wikibase-item"


@runtime_checkable
class IdGenerator(Protocol):
    """Mint unique numeric ids per entity kind."""

    def new_id(self, kind: str) -> int: ...


@dataclass(frozen=True, slots=True)
class SaveResult:
    item_id: ItemId
    revision_id: RevisionId
    created: bool


@runtime_checkable
class RecordStore(Protocol):
    """Compare-and-swap write of a whole record.

    ``base_revision_id`` is ``None`` for a new record. Implementations raise
    ``StorageConflict`` when the stored revision differs from the base (or the record
    already exists for a new write) and ``StorageError`` for any other failure.
    """

    def save(
        self,
        record: Item,
        *,
        base_revision_id: RevisionId | None,
        summary: str,
    ) -> SaveResult: ...
