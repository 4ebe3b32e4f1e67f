"""Records (items) and their statements.

A record owns an ordered statement list and a label per language. Statements carry a
main snak only: qualifiers and references are not part of this model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from reconcile_edit.domain.model.enums import EntityKind, Rank, SnakType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from reconcile_edit.domain.model.ids import ItemId, PropertyId
    from reconcile_edit.domain.model.values import DataValue


@dataclass(frozen=True, slots=True)
class PropertyValueSnak:
    property_id: PropertyId
    value: DataValue

    SNAK_TYPE: ClassVar[SnakType] = SnakType.VALUE


@dataclass(frozen=True, slots=True)
class PropertySomeValueSnak:
    property_id: PropertyId

    SNAK_TYPE: ClassVar[SnakType] = SnakType.SOME_VALUE


@dataclass(frozen=True, slots=True)
class PropertyNoValueSnak:
    property_id: PropertyId

    SNAK_TYPE: ClassVar[SnakType] = SnakType.NO_VALUE


type Snak = PropertyValueSnak | PropertySomeValueSnak | PropertyNoValueSnak


@dataclass(frozen=True, slots=True)
class Statement:
    main_snak: Snak
    guid: str | None = None
    rank: Rank = Rank.NORMAL

    @property
    def property_id(self) -> PropertyId:
        return self.main_snak.property_id


@dataclass(kw_only=True)
class Item:
    """A record: identifier, statements and labels."""

    id: ItemId | None = None
    labels: dict[str, str] = field(default_factory=dict[str, str])
    statements: list[Statement] = field(default_factory=list[Statement])

    ENTITY_KIND: ClassVar[EntityKind] = EntityKind.ITEM

    def statements_for(self, property_id: PropertyId) -> list[Statement]:
        return [
            statement for statement in self.statements if statement.property_id == property_id
        ]

    def property_ids(self) -> list[PropertyId]:
        """Distinct properties in statement order."""

        seen: list[PropertyId] = []
        for statement in self.statements:
            if statement.property_id not in seen:
                seen.append(statement.property_id)
        return seen


def value_snaks(statements: Iterable[Statement]) -> list[PropertyValueSnak]:
    return [
        statement.main_snak
        for statement in statements
        if isinstance(statement.main_snak, PropertyValueSnak)
    ]
