"""Wikibase JSON codec for records.

The shapes follow the Wikibase entity serialization (``mainsnak``/``datavalue``,
``claims`` grouped by property, ``labels`` keyed by language). Statements are grouped
by property in first-appearance order on output.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, cast

from reconcile_edit.domain.model import (
    EntityIdValue,
    InvalidEntityIdError,
    Item,
    ItemId,
    MonolingualTextValue,
    PropertyId,
    PropertyNoValueSnak,
    PropertySomeValueSnak,
    PropertyValueSnak,
    QuantityValue,
    Rank,
    SnakType,
    Statement,
    StringValue,
    parse_entity_id,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from reconcile_edit.domain.model import DataValue, Snak

type JsonObject = dict[str, Any]


class SerializationError(ValueError):
    """Raised when a serialized entity does not have the expected shape."""


# Values ---------------------------------------------------------------------------


def serialize_value(value: DataValue) -> JsonObject:
    match value:
        case StringValue(value=text):
            payload: object = text
        case EntityIdValue(entity_id=entity_id):
            payload = {
                "entity-type": str(entity_id.kind),
                "numeric-id": entity_id.numeric_id,
                "id": entity_id.serialization,
            }
        case QuantityValue(unit=unit):
            payload = {"amount": value.literal, "unit": unit}
        case MonolingualTextValue(language=language, text=text):
            payload = {"text": text, "language": language}
    return {"value": payload, "type": value.VALUE_TYPE}


def deserialize_value(data: Mapping[str, Any]) -> DataValue:
    value_type = data.get("type")
    payload = data.get("value")
    try:
        if value_type == StringValue.VALUE_TYPE and isinstance(payload, str):
            return StringValue(payload)
        if value_type == EntityIdValue.VALUE_TYPE and isinstance(payload, dict):
            entity = cast("dict[str, Any]", payload)
            return EntityIdValue(parse_entity_id(_entity_id_serialization(entity)))
        if value_type == QuantityValue.VALUE_TYPE and isinstance(payload, dict):
            quantity = cast("dict[str, Any]", payload)
            return QuantityValue(
                amount=Decimal(str(quantity["amount"])),
                unit=str(quantity.get("unit", "1")),
            )
        if value_type == MonolingualTextValue.VALUE_TYPE and isinstance(payload, dict):
            text = cast("dict[str, Any]", payload)
            return MonolingualTextValue(language=str(text["language"]), text=str(text["text"]))
    except (KeyError, InvalidOperation, InvalidEntityIdError) as exc:
        raise SerializationError(f"Invalid {value_type} data value: {payload!r}") from exc
    raise SerializationError(f"Unsupported data value: {dict(data)!r}")


def _entity_id_serialization(payload: Mapping[str, Any]) -> str:
    if "id" in payload:
        return str(payload["id"])
    prefix = "P" if payload.get("entity-type") == "property" else "Q"
    return f"{prefix}{payload['numeric-id']}"


# Snaks and statements ---------------------------------------------------------------


def serialize_snak(snak: Snak) -> JsonObject:
    data: JsonObject = {
        "snaktype": str(snak.SNAK_TYPE),
        "property": snak.property_id.serialization,
    }
    if isinstance(snak, PropertyValueSnak):
        data["datavalue"] = serialize_value(snak.value)
    return data


def deserialize_snak(data: Mapping[str, Any]) -> Snak:
    try:
        property_id = PropertyId(str(data["property"]))
        snak_type = SnakType(data.get("snaktype", SnakType.VALUE))
    except (KeyError, ValueError) as exc:
        raise SerializationError(f"Invalid snak: {dict(data)!r}") from exc

    match snak_type:
        case SnakType.VALUE:
            datavalue = data.get("datavalue")
            if not isinstance(datavalue, dict):
                raise SerializationError(f"Value snak on {property_id} has no datavalue")
            return PropertyValueSnak(
                property_id,
                deserialize_value(cast("dict[str, Any]", datavalue)),
            )
        case SnakType.SOME_VALUE:
            return PropertySomeValueSnak(property_id)
        case SnakType.NO_VALUE:
            return PropertyNoValueSnak(property_id)


def serialize_statement(statement: Statement) -> JsonObject:
    data: JsonObject = {
        "mainsnak": serialize_snak(statement.main_snak),
        "type": "statement",
        "rank": str(statement.rank),
    }
    if statement.guid is not None:
        data["id"] = statement.guid
    return data


def deserialize_statement(data: Mapping[str, Any]) -> Statement:
    mainsnak = data.get("mainsnak")
    if not isinstance(mainsnak, dict):
        raise SerializationError("Statement has no mainsnak")
    try:
        rank = Rank(data.get("rank", Rank.NORMAL))
    except ValueError as exc:
        raise SerializationError(f"Invalid rank {data.get('rank')!r}") from exc
    guid = data.get("id")
    return Statement(
        main_snak=deserialize_snak(cast("dict[str, Any]", mainsnak)),
        guid=str(guid) if guid is not None else None,
        rank=rank,
    )


# Items ---------------------------------------------------------------------------


def serialize_item(item: Item) -> JsonObject:
    claims: dict[str, list[JsonObject]] = {}
    for statement in item.statements:
        claims.setdefault(statement.property_id.serialization, []).append(
            serialize_statement(statement)
        )
    data: JsonObject = {
        "type": str(item.ENTITY_KIND),
        "labels": {
            language: {"language": language, "value": text}
            for language, text in item.labels.items()
        },
        "claims": claims,
    }
    if item.id is not None:
        data["id"] = item.id.serialization
    return data


def deserialize_item(data: Mapping[str, Any]) -> Item:
    if data.get("type", "item") != "item":
        raise SerializationError(f"Not an item: {data.get('type')!r}")

    raw_id = data.get("id")
    try:
        item_id = ItemId(str(raw_id)) if raw_id else None
    except InvalidEntityIdError as exc:
        raise SerializationError(str(exc)) from exc

    labels: dict[str, str] = {}
    raw_labels = data.get("labels") or {}
    if not isinstance(raw_labels, dict):
        raise SerializationError("labels must be a mapping")
    for language, label in cast("dict[str, Any]", raw_labels).items():
        if isinstance(label, dict) and "value" in label:
            labels[str(language)] = str(cast("dict[str, Any]", label)["value"])
        else:
            raise SerializationError(f"Invalid label for {language!r}")

    statements: list[Statement] = []
    raw_claims = data.get("claims") or {}
    if not isinstance(raw_claims, dict):
        raise SerializationError("claims must be a mapping")
    for group in cast("dict[str, Any]", raw_claims).values():
        if not isinstance(group, list):
            raise SerializationError("claims must map property ids to lists")
        statements.extend(
            deserialize_statement(cast("dict[str, Any]", statement))
            for statement in cast("list[Any]", group)
        )

    return Item(id=item_id, labels=labels, statements=statements)
