"""Pydantic models describing the supported request payloads.

The models only check shape. Rules that need a specific error (missing statement keys,
qualifiers, sitelinks) are enforced by the readers in ``reconcile_edit.input.formats``
so they can raise the matching domain error.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from reconcile_edit.domain.model import SnakType

VERSION_KEYS = ("version", "wikibasereconcileedit-version")


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class InputBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class EntityEnvelope(InputBaseModel):
    """Fields shared by every entity payload version."""

    entity_type: str = Field(default="item", alias="type")
    sitelinks: Any = None


# 0.0.1/minimal ------------------------------------------------------------------------


class MinimalStatementPayload(InputBaseModel):
    property_ref: str | None = Field(default=None, alias="property")
    value: Any = None
    qualifiers: Any = None
    references: Any = None

    _normalize_property = field_validator("property_ref", mode="before")(_blank_to_none)


class MinimalEntityPayload(EntityEnvelope):
    labels: dict[str, str] = Field(default_factory=dict[str, str])
    statements: list[MinimalStatementPayload] = Field(
        default_factory=list[MinimalStatementPayload]
    )


# 0.0.1/compact ------------------------------------------------------------------------


class CompactEntityPayload(EntityEnvelope):
    labels: dict[str, str] | list[str] = Field(default_factory=dict[str, str])
    statements: list[dict[str, Any]] = Field(default_factory=list[dict[str, Any]])


# 0.0.1/full ---------------------------------------------------------------------------


class DataValuePayload(InputBaseModel):
    value: Any = None
    value_type: str | None = Field(default=None, alias="type")


class SnakPayload(InputBaseModel):
    snaktype: SnakType = SnakType.VALUE
    property_ref: str | None = Field(default=None, alias="property")
    datavalue: DataValuePayload | None = None


class StatementPayload(InputBaseModel):
    mainsnak: SnakPayload | None = None
    qualifiers: Any = None
    references: Any = None


class LabelPayload(InputBaseModel):
    language: str | None = None
    value: str


class FullEntityPayload(EntityEnvelope):
    labels: dict[str, LabelPayload] = Field(default_factory=dict[str, LabelPayload])
    claims: dict[str, list[StatementPayload]] = Field(
        default_factory=dict[str, list[StatementPayload]]
    )


# Reconciliation directive --------------------------------------------------------------


class DirectivePayload(InputBaseModel):
    identifying_property: str = Field(
        validation_alias=AliasChoices("identifyingProperty", "urlReconcile"),
    )

    _normalize_property = field_validator("identifying_property", mode="before")(
        _blank_to_none
    )
