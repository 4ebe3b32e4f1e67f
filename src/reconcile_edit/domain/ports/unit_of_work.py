"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from reconcile_edit.domain.ports.lookup import (
        EntityIdLookup,
        ExternalLinkIndex,
        RevisionLookup,
    )
    from reconcile_edit.domain.ports.persistence import IdGenerator, RecordStore
    from reconcile_edit.domain.ports.properties import (
        PropertyDatatypeLookup,
        PropertyLabelResolver,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class RecordRepositories(RepositoryCollection):
    """Everything a reconciliation edit reads from or writes to."""

    datatypes: PropertyDatatypeLookup
    labels: PropertyLabelResolver
    links: ExternalLinkIndex
    entity_ids: EntityIdLookup
    revisions: RevisionLookup
    id_generator: IdGenerator
    records: RecordStore


type RecordUnitOfWork = UnitOfWork[RecordRepositories]
