"""Ports for locating and loading existing records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Literal, Protocol, runtime_checkable

if TYPE_CHECKING:
    from reconcile_edit.domain.model import Item, ItemId, PropertyId

type PageRef = int
type RevisionId = int


@runtime_checkable
class ExternalLinkIndex(Protocol):
    """Secondary index from an external URL to the pages that link to it."""

    def candidates_for(self, value: str) -> set[PageRef]: ...


@runtime_checkable
class EntityIdLookup(Protocol):
    """Map a page to the entity stored on it."""

    def entity_id_for(self, page: PageRef) -> ItemId | PropertyId | None: ...


class RevisionStatus(StrEnum):
    CONCRETE = "concrete"
    REDIRECT = "redirect"
    MISSING = "missing"


@dataclass(frozen=True, slots=True, kw_only=True)
class ConcreteRevision:
    """The record exists; ``revision_id`` is its latest revision."""

    record: Item
    revision_id: RevisionId
    status: Literal[RevisionStatus.CONCRETE] = RevisionStatus.CONCRETE


@dataclass(frozen=True, slots=True, kw_only=True)
class RedirectedRecord:
    """The record was merged away and now redirects to ``target``."""

    source: ItemId
    target: ItemId
    status: Literal[RevisionStatus.REDIRECT] = RevisionStatus.REDIRECT


@dataclass(frozen=True, slots=True, kw_only=True)
class MissingRecord:
    item_id: ItemId
    status: Literal[RevisionStatus.MISSING] = RevisionStatus.MISSING


type RevisionLookupResult = ConcreteRevision | RedirectedRecord | MissingRecord


@runtime_checkable
class RevisionLookup(Protocol):
    """Load a record together with its latest revision marker."""

    def latest_revision(self, item_id: ItemId) -> RevisionLookupResult: ...
