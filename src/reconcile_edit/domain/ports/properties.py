"""Ports for property metadata and value parsing."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from reconcile_edit.domain.model import DataValue, PropertyId


@runtime_checkable
class PropertyDatatypeLookup(Protocol):
    """Read-only access to the declared datatype of a property."""

    def datatype_of(self, property_id: PropertyId) -> str | None:
        """Return the datatype id, or ``None`` when the property does not exist."""
        ...


@runtime_checkable
class PropertyLabelResolver(Protocol):
    """Resolve human-readable property labels to property ids."""

    def ids_for_labels(self, labels: Sequence[str]) -> Mapping[str, PropertyId]:
        """Return ids for the labels that resolve; unresolved labels are absent."""
        ...


class ValueParser(Protocol):
    def __call__(self, literal: object) -> DataValue: ...


@runtime_checkable
class ValueParserFactory(Protocol):
    """Select a value parser by property datatype."""

    def parser_for(self, datatype: str) -> ValueParser: ...
