"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityKind(StrEnum):
    ITEM = "item"
    PROPERTY = "property"


class SnakType(StrEnum):
    VALUE = "value"
    SOME_VALUE = "somevalue"
    NO_VALUE = "novalue"


class Rank(StrEnum):
    PREFERRED = "preferred"
    NORMAL = "normal"
    DEPRECATED = "deprecated"


class Datatype(StrEnum):
    """Property datatypes with a registered value parser."""

    STRING = "string"
    URL = "url"
    EXTERNAL_ID = "external-id"
    COMMONS_MEDIA = "commonsMedia"
    WIKIBASE_ITEM = "wikibase-item"
    WIKIBASE_PROPERTY = "wikibase-property"
    QUANTITY = "quantity"
    MONOLINGUAL_TEXT = "monolingualtext"
