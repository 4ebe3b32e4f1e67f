"""Strategies for merging a draft into its base record."""

from __future__ import annotations

from .put import EditStrategy, PutStrategy, new_statement_guid

__all__ = ["EditStrategy", "PutStrategy", "new_statement_guid"]
