"""The "put" edit strategy: replace statements property by property.

For every property the draft mentions, the merged record holds exactly the draft's
statements for it. Properties the draft does not mention are carried over from the
base in their original order, followed by the draft's statements in draft order.
Labels are replaced per language.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol
from uuid import uuid4

from reconcile_edit.domain.model import Item, Statement

if TYPE_CHECKING:
    from collections.abc import Callable

    from reconcile_edit.domain.model import Draft, ItemId
    from reconcile_edit.domain.reconciliation import Base


class EditStrategy(Protocol):
    """Merge a draft into a base record, producing the record to save."""

    def apply(self, base: Base, draft: Draft) -> Item: ...


def new_statement_guid(item_id: ItemId) -> str:
    return f"{item_id}${uuid4()}"


@dataclass(slots=True)
class PutStrategy:
    new_guid: Callable[[ItemId], str] = new_statement_guid

    def apply(self, base: Base, draft: Draft) -> Item:
        item_id = base.item_id
        replaced = set(draft.property_ids())

        carried = [
            statement
            for statement in base.record.statements
            if statement.property_id not in replaced
        ]
        replacements = [
            Statement(main_snak=statement.snak, guid=self.new_guid(item_id))
            for statement in draft.statements
        ]
        return Item(
            id=item_id,
            labels={**base.record.labels, **draft.labels},
            statements=carried + replacements,
        )


if TYPE_CHECKING:
    _strategy_check: EditStrategy = PutStrategy()
