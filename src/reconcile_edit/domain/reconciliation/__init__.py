"""Locate the record an edit applies to."""

from __future__ import annotations

from .contracts import Base, BaseStatus, ExistingBase, NewBase
from .resolve import ReconciliationService, has_value

__all__ = [
    "Base",
    "BaseStatus",
    "ExistingBase",
    "NewBase",
    "ReconciliationService",
    "has_value",
]
