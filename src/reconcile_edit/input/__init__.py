"""Read request payloads into drafts and reconciliation directives."""

from __future__ import annotations

from .directive import DirectiveInput, DirectiveReader, ReconciliationDirective
from .formats import ENTITY_READERS, EntityInput, StatementInput
from .normalizer import InputNormalizer
from .parsers import DEFAULT_PARSERS, ValueParserRegistry

__all__ = [
    "DEFAULT_PARSERS",
    "ENTITY_READERS",
    "DirectiveInput",
    "DirectiveReader",
    "EntityInput",
    "InputNormalizer",
    "ReconciliationDirective",
    "StatementInput",
    "ValueParserRegistry",
]
