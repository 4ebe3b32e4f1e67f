"""Entity identifiers.

Identifiers are value objects compared by their serialization. Property ids look like
``P123`` and item ids like ``Q42``; a leading zero is never valid.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import ClassVar, Final

from reconcile_edit.domain.model.enums import EntityKind

PROPERTY_ID_PATTERN: Final[re.Pattern[str]] = re.compile(r"^P[1-9]\d{0,9}$")
ITEM_ID_PATTERN: Final[re.Pattern[str]] = re.compile(r"^Q[1-9]\d{0,9}$")


class InvalidEntityIdError(ValueError):
    """Raised when a string is not a valid serialization for the requested id type."""


@dataclass(frozen=True, slots=True)
class EntityId:
    serialization: str

    PREFIX: ClassVar[str]
    PATTERN: ClassVar[re.Pattern[str]]
    KIND: ClassVar[EntityKind]

    def __post_init__(self) -> None:
        if not self.PATTERN.match(self.serialization):
            raise InvalidEntityIdError(
                f"{self.serialization!r} is not a valid {type(self).__name__}"
            )

    @property
    def kind(self) -> EntityKind:
        return self.KIND

    @property
    def numeric_id(self) -> int:
        return int(self.serialization[1:])

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return bool(cls.PATTERN.match(value))

    def __str__(self) -> str:
        return self.serialization


@dataclass(frozen=True, slots=True)
class PropertyId(EntityId):
    PREFIX: ClassVar[str] = "P"
    PATTERN: ClassVar[re.Pattern[str]] = PROPERTY_ID_PATTERN
    KIND: ClassVar[EntityKind] = EntityKind.PROPERTY


@dataclass(frozen=True, slots=True)
class ItemId(EntityId):
    PREFIX: ClassVar[str] = "Q"
    PATTERN: ClassVar[re.Pattern[str]] = ITEM_ID_PATTERN
    KIND: ClassVar[EntityKind] = EntityKind.ITEM

    @classmethod
    def from_number(cls, number: int) -> ItemId:
        return cls(f"{cls.PREFIX}{number}")


def parse_entity_id(value: str) -> ItemId | PropertyId:
    """Parse an item or property id serialization."""

    if ItemId.is_valid(value):
        return ItemId(value)
    if PropertyId.is_valid(value):
        return PropertyId(value)
    raise InvalidEntityIdError(f"{value!r} is not a valid entity id")
