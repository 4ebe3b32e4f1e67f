"""Value parsers keyed by property datatype."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, cast

from reconcile_edit.domain.errors import UnsupportedDatatype, ValueParseError
from reconcile_edit.domain.links import make_link_index
from reconcile_edit.domain.model import (
    Datatype,
    EntityIdValue,
    InvalidEntityIdError,
    ItemId,
    MonolingualTextValue,
    PropertyId,
    QuantityValue,
    StringValue,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from reconcile_edit.domain.model import DataValue
    from reconcile_edit.domain.ports import ValueParser


def parse_string(datatype: str, literal: object) -> StringValue:
    if not isinstance(literal, str):
        raise ValueParseError(datatype, literal, "expected a string")
    if not literal.strip():
        raise ValueParseError(datatype, literal, "empty string")
    return StringValue(literal)


def parse_url(datatype: str, literal: object) -> StringValue:
    """Accept only URLs the external link index can key, so they can be found again."""

    value = parse_string(datatype, literal)
    if make_link_index(value.value) is None:
        raise ValueParseError(datatype, literal, "not an indexable link")
    return value


def parse_item_id(datatype: str, literal: object) -> EntityIdValue:
    try:
        return EntityIdValue(ItemId(str(literal)))
    except InvalidEntityIdError as exc:
        raise ValueParseError(datatype, literal, str(exc)) from exc


def parse_property_id(datatype: str, literal: object) -> EntityIdValue:
    try:
        return EntityIdValue(PropertyId(str(literal)))
    except InvalidEntityIdError as exc:
        raise ValueParseError(datatype, literal, str(exc)) from exc


def parse_quantity(datatype: str, literal: object) -> QuantityValue:
    if isinstance(literal, bool):
        raise ValueParseError(datatype, literal, "expected a number")
    amount: object = literal
    unit = "1"
    if isinstance(literal, dict):
        quantity = cast("dict[str, Any]", literal)
        amount = quantity.get("amount")
        unit = str(quantity.get("unit", "1"))
    if not isinstance(amount, (int, float, str, Decimal)):
        raise ValueParseError(datatype, literal, "expected a number")
    try:
        parsed = Decimal(str(amount).strip())
    except InvalidOperation as exc:
        raise ValueParseError(datatype, literal, "not a decimal number") from exc
    if not parsed.is_finite():
        raise ValueParseError(datatype, literal, "not a finite number")
    return QuantityValue(amount=parsed, unit=unit)


def parse_monolingual_text(datatype: str, literal: object) -> MonolingualTextValue:
    if not isinstance(literal, dict):
        raise ValueParseError(datatype, literal, "expected {language, text}")
    text = cast("dict[str, Any]", literal)
    language = text.get("language")
    value = text.get("text")
    if not isinstance(language, str) or not isinstance(value, str) or not language or not value:
        raise ValueParseError(datatype, literal, "expected {language, text}")
    return MonolingualTextValue(language=language, text=value)


type _DatatypeParser = Callable[[str, object], DataValue]

DEFAULT_PARSERS: Mapping[str, _DatatypeParser] = {
    Datatype.STRING: parse_string,
    Datatype.URL: parse_url,
    Datatype.EXTERNAL_ID: parse_string,
    Datatype.COMMONS_MEDIA: parse_string,
    Datatype.WIKIBASE_ITEM: parse_item_id,
    Datatype.WIKIBASE_PROPERTY: parse_property_id,
    Datatype.QUANTITY: parse_quantity,
    Datatype.MONOLINGUAL_TEXT: parse_monolingual_text,
}


@dataclass(slots=True)
class ValueParserRegistry:
    """Default ``ValueParserFactory`` backed by a datatype → parser mapping."""

    parsers: Mapping[str, _DatatypeParser] = field(default_factory=lambda: dict(DEFAULT_PARSERS))

    def parser_for(self, datatype: str) -> ValueParser:
        parse = self.parsers.get(datatype)
        if parse is None:
            raise UnsupportedDatatype(datatype)

        def parser(literal: object) -> DataValue:
            return parse(datatype, literal)

        return parser


if TYPE_CHECKING:
    from reconcile_edit.domain.ports import ValueParserFactory

    _factory_check: ValueParserFactory = ValueParserRegistry()
