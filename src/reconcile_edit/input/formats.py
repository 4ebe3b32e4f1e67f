"""Versioned payload readers.

Each reader turns one payload version into the same ``EntityInput``: labels plus an
ordered list of unresolved statements. Readers only look at the payload itself, so
every structural rule is enforced before any property or datatype lookup happens.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, cast

from pydantic import ValidationError as PydanticValidationError

from reconcile_edit.domain.errors import (
    MalformedPayload,
    StatementsMissingKeys,
    UnsupportedAnnotation,
    UnsupportedEntityType,
    UnsupportedSitelinks,
    UnsupportedVersion,
)
from reconcile_edit.domain.model import EntityKind, SnakType
from reconcile_edit.input.schema import (
    VERSION_KEYS,
    CompactEntityPayload,
    FullEntityPayload,
    MinimalEntityPayload,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from pydantic import BaseModel

    from reconcile_edit.input.schema import DataValuePayload, EntityEnvelope

ANNOTATION_KEYS = ("qualifiers", "references")


@dataclass(frozen=True, slots=True, kw_only=True)
class StatementInput:
    """A statement as written in the payload, before property resolution."""

    index: int
    property_ref: str
    literal: object = None
    snak_type: SnakType = SnakType.VALUE


@dataclass(frozen=True, slots=True, kw_only=True)
class EntityInput:
    labels: dict[str, str] = field(default_factory=dict[str, str])
    statements: tuple[StatementInput, ...] = ()

    def property_refs(self) -> list[str]:
        refs: list[str] = []
        for statement in self.statements:
            if statement.property_ref not in refs:
                refs.append(statement.property_ref)
        return refs


type EntityReader = Callable[[Mapping[str, Any], str], EntityInput]


def validate_payload[TModel: BaseModel](model: type[TModel], payload: Mapping[str, Any]) -> TModel:
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise MalformedPayload(f"Invalid payload: {exc.error_count()} error(s)\n{exc}") from exc


def _check_envelope(envelope: EntityEnvelope) -> None:
    if envelope.entity_type != EntityKind.ITEM:
        raise UnsupportedEntityType(envelope.entity_type)
    if envelope.sitelinks:
        raise UnsupportedSitelinks


def _is_missing(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# 0.0.1/minimal ------------------------------------------------------------------------


def read_minimal(payload: Mapping[str, Any], default_language: str) -> EntityInput:  # noqa: ARG001
    """``{"labels": {lang: text}, "statements": [{"property": ref, "value": literal}]}``"""

    entity = validate_payload(MinimalEntityPayload, payload)
    _check_envelope(entity)

    statements: list[StatementInput] = []
    for index, statement in enumerate(entity.statements):
        if statement.qualifiers or statement.references:
            raise UnsupportedAnnotation(statement.property_ref or f"#{index}")
        if statement.property_ref is None or _is_missing(statement.value):
            raise StatementsMissingKeys(index)
        statements.append(
            StatementInput(
                index=index,
                property_ref=statement.property_ref,
                literal=statement.value,
            )
        )
    return EntityInput(labels=dict(entity.labels), statements=tuple(statements))


# 0.0.1/compact ------------------------------------------------------------------------


def read_compact(payload: Mapping[str, Any], default_language: str) -> EntityInput:
    """``{"labels": {lang: text} | [text], "statements": [{ref: literal}, ...]}``

    A bare label list holds a single label in ``default_language``.
    """

    entity = validate_payload(CompactEntityPayload, payload)
    _check_envelope(entity)

    if isinstance(entity.labels, list):
        if len(entity.labels) > 1:
            raise MalformedPayload(
                f"A label list may hold a single {default_language!r} label, "
                f"got {len(entity.labels)}"
            )
        labels = {default_language: entity.labels[0]} if entity.labels else {}
    else:
        labels = dict(entity.labels)

    statements: list[StatementInput] = []
    for index, entry in enumerate(entity.statements):
        annotated = [key for key in ANNOTATION_KEYS if entry.get(key)]
        if annotated:
            refs = [key for key in entry if key not in ANNOTATION_KEYS]
            raise UnsupportedAnnotation(refs[0] if refs else f"#{index}")
        pairs = [(ref, literal) for ref, literal in entry.items() if ref not in ANNOTATION_KEYS]
        if not pairs:
            raise StatementsMissingKeys(index)
        for ref, literal in pairs:
            if _is_missing(ref) or _is_missing(literal):
                raise StatementsMissingKeys(index)
            statements.append(
                StatementInput(index=index, property_ref=ref.strip(), literal=literal)
            )
    return EntityInput(labels=labels, statements=tuple(statements))


# 0.0.1/full ---------------------------------------------------------------------------


def _literal_from_datavalue(datavalue: DataValuePayload) -> object:
    value = datavalue.value
    if datavalue.value_type == "wikibase-entityid" and isinstance(value, dict):
        entity = cast("dict[str, Any]", value)
        if "id" in entity:
            return entity["id"]
    return value


def read_full(payload: Mapping[str, Any], default_language: str) -> EntityInput:  # noqa: ARG001
    """Wikibase JSON: ``labels`` keyed by language, ``claims`` grouped by property id."""

    entity = validate_payload(FullEntityPayload, payload)
    _check_envelope(entity)

    labels: dict[str, str] = {}
    for language, label in entity.labels.items():
        if label.language is not None and label.language != language:
            raise MalformedPayload(
                f"Label keyed {language!r} declares language {label.language!r}"
            )
        labels[language] = label.value

    statements: list[StatementInput] = []
    index = 0
    for group_ref, group in entity.claims.items():
        for statement in group:
            if statement.qualifiers or statement.references:
                raise UnsupportedAnnotation(group_ref)
            snak = statement.mainsnak
            if snak is None:
                raise StatementsMissingKeys(index)
            property_ref = snak.property_ref or group_ref
            if property_ref != group_ref:
                raise MalformedPayload(
                    f"Statement #{index} on {property_ref} is grouped under {group_ref}"
                )
            literal: object = None
            if snak.snaktype is SnakType.VALUE:
                if snak.datavalue is None or _is_missing(snak.datavalue.value):
                    raise StatementsMissingKeys(index)
                literal = _literal_from_datavalue(snak.datavalue)
            statements.append(
                StatementInput(
                    index=index,
                    property_ref=property_ref,
                    literal=literal,
                    snak_type=snak.snaktype,
                )
            )
            index += 1
    return EntityInput(labels=labels, statements=tuple(statements))


ENTITY_READERS: Mapping[str, EntityReader] = {
    "0.0.1/minimal": read_minimal,
    "0.0.1/compact": read_compact,
    "0.0.1/full": read_full,
}


def read_version(payload: object, supported: Sequence[str]) -> str:
    """Return the payload's version tag if it is one of ``supported``."""

    if not isinstance(payload, Mapping):
        raise MalformedPayload(f"Expected a JSON object, got {type(payload).__name__}")
    fields = cast("Mapping[str, Any]", payload)
    version = next((fields[key] for key in VERSION_KEYS if key in fields), None)
    if not isinstance(version, str) or version not in supported:
        raise UnsupportedVersion(version, supported=supported)
    return version
