"""Base records produced by reconciliation and consumed by an edit strategy."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Literal, cast

if TYPE_CHECKING:
    from reconcile_edit.domain.model import Item, ItemId
    from reconcile_edit.domain.ports import RevisionId


class BaseStatus(StrEnum):
    NEW = "new"
    EXISTING = "existing"


@dataclass(frozen=True, slots=True, kw_only=True)
class NewBase:
    """No record matched; ``record`` is empty and carries a freshly minted id."""

    record: Item
    status: Literal[BaseStatus.NEW] = BaseStatus.NEW

    @property
    def item_id(self) -> ItemId:
        return cast("ItemId", self.record.id)

    @property
    def revision_id(self) -> None:
        return None


@dataclass(frozen=True, slots=True, kw_only=True)
class ExistingBase:
    """Exactly one record matched; edits are checked against ``revision_id``."""

    record: Item
    revision_id: RevisionId
    status: Literal[BaseStatus.EXISTING] = BaseStatus.EXISTING

    @property
    def item_id(self) -> ItemId:
        return cast("ItemId", self.record.id)


type Base = NewBase | ExistingBase
