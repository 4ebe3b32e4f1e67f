"""Typed data values carried by value snaks.

Equality is structural and exact: no case folding and no normalization.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import ClassVar

from reconcile_edit.domain.model.ids import ItemId, PropertyId


@dataclass(frozen=True, slots=True)
class StringValue:
    value: str

    VALUE_TYPE: ClassVar[str] = "string"

    @property
    def literal(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class EntityIdValue:
    entity_id: ItemId | PropertyId

    VALUE_TYPE: ClassVar[str] = "wikibase-entityid"

    @property
    def literal(self) -> str:
        return self.entity_id.serialization


@dataclass(frozen=True, slots=True)
class QuantityValue:
    amount: Decimal
    unit: str = "1"

    VALUE_TYPE: ClassVar[str] = "quantity"

    @property
    def literal(self) -> str:
        sign = "+" if self.amount >= 0 else ""
        return f"{sign}{self.amount}"


@dataclass(frozen=True, slots=True)
class MonolingualTextValue:
    language: str
    text: str

    VALUE_TYPE: ClassVar[str] = "monolingualtext"

    @property
    def literal(self) -> str:
        return self.text


type DataValue = StringValue | EntityIdValue | QuantityValue | MonolingualTextValue
