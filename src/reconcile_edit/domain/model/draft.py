"""Draft records produced by input normalization.

A draft is not persistable. Its statements are replacement directives: for every
property present in the draft, the draft's statements replace the base's.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reconcile_edit.domain.model.ids import PropertyId
    from reconcile_edit.domain.model.record import Snak


@dataclass(frozen=True, slots=True, kw_only=True)
class DraftStatement:
    """One statement of the input, as written and as resolved."""

    property_ref: str
    literal: object
    snak: Snak

    @property
    def property_id(self) -> PropertyId:
        return self.snak.property_id


@dataclass(frozen=True, slots=True, kw_only=True)
class Draft:
    identifying_property: PropertyId
    identifying_value: str
    statements: tuple[DraftStatement, ...] = ()
    labels: dict[str, str] = field(default_factory=dict[str, str])

    def property_ids(self) -> list[PropertyId]:
        seen: list[PropertyId] = []
        for statement in self.statements:
            if statement.property_id not in seen:
                seen.append(statement.property_id)
        return seen
