"""Public domain model surface."""

from __future__ import annotations

from reconcile_edit.domain.model.draft import Draft, DraftStatement
from reconcile_edit.domain.model.enums import Datatype, EntityKind, Rank, SnakType
from reconcile_edit.domain.model.ids import (
    EntityId,
    InvalidEntityIdError,
    ItemId,
    PropertyId,
    parse_entity_id,
)
from reconcile_edit.domain.model.record import (
    Item,
    PropertyNoValueSnak,
    PropertySomeValueSnak,
    PropertyValueSnak,
    Snak,
    Statement,
    value_snaks,
)
from reconcile_edit.domain.model.values import (
    DataValue,
    EntityIdValue,
    MonolingualTextValue,
    QuantityValue,
    StringValue,
)

__all__ = [  # noqa: RUF022
    # ids
    "EntityId",
    "InvalidEntityIdError",
    "ItemId",
    "PropertyId",
    "parse_entity_id",
    # values
    "DataValue",
    "EntityIdValue",
    "MonolingualTextValue",
    "QuantityValue",
    "StringValue",
    # records
    "Item",
    "PropertyNoValueSnak",
    "PropertySomeValueSnak",
    "PropertyValueSnak",
    "Snak",
    "Statement",
    "value_snaks",
    # drafts
    "Draft",
    "DraftStatement",
    # enums
    "Datatype",
    "EntityKind",
    "Rank",
    "SnakType",
]
