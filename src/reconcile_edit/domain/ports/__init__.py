"""Domain port definitions for adapters."""

from __future__ import annotations

from .lookup import (
    ConcreteRevision,
    EntityIdLookup,
    ExternalLinkIndex,
    MissingRecord,
    PageRef,
    RedirectedRecord,
    RevisionId,
    RevisionLookup,
    RevisionLookupResult,
    RevisionStatus,
)
from .persistence import ITEM_ID_KIND, IdGenerator, RecordStore, SaveResult
from .properties import (
    PropertyDatatypeLookup,
    PropertyLabelResolver,
    ValueParser,
    ValueParserFactory,
)
from .unit_of_work import (
    RecordRepositories,
    RecordUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "ITEM_ID_KIND",
    "ConcreteRevision",
    "EntityIdLookup",
    "ExternalLinkIndex",
    "IdGenerator",
    "MissingRecord",
    "PageRef",
    "PropertyDatatypeLookup",
    "PropertyLabelResolver",
    "RecordRepositories",
    "RecordStore",
    "RecordUnitOfWork",
    "RedirectedRecord",
    "RepositoryCollection",
    "RevisionId",
    "RevisionLookup",
    "RevisionLookupResult",
    "RevisionStatus",
    "SaveResult",
    "UnitOfWork",
    "ValueParser",
    "ValueParserFactory",
]
