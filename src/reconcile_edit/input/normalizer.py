"""Turn raw entity payloads into drafts.

Normalization runs in two phases. ``read`` selects the reader registered for the
payload's version and applies every structural rule. ``build`` then resolves property
references, looks up datatypes and parses each literal into a data value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

from reconcile_edit.domain.errors import (
    IdentifyingStatementNotValue,
    MissingOrDuplicateIdentifyingStatement,
    PropertyDatatypeLookupError,
    PropertyNotFound,
)
from reconcile_edit.domain.model import (
    Draft,
    DraftStatement,
    PropertyId,
    PropertyNoValueSnak,
    PropertySomeValueSnak,
    PropertyValueSnak,
    SnakType,
)
from reconcile_edit.input.formats import ENTITY_READERS, read_version
from reconcile_edit.input.parsers import ValueParserRegistry

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from reconcile_edit.domain.model import Snak
    from reconcile_edit.domain.ports import (
        PropertyDatatypeLookup,
        PropertyLabelResolver,
        ValueParserFactory,
    )
    from reconcile_edit.input.formats import EntityInput, EntityReader, StatementInput

log = getLogger(__name__)

DEFAULT_LABEL_LANGUAGE = "en"


@dataclass(slots=True)
class InputNormalizer:
    """Normalize versioned entity payloads into ``Draft`` objects."""

    datatypes: PropertyDatatypeLookup
    labels: PropertyLabelResolver
    parsers: ValueParserFactory = field(default_factory=ValueParserRegistry)
    readers: Mapping[str, EntityReader] = field(default_factory=lambda: dict(ENTITY_READERS))
    default_label_language: str = DEFAULT_LABEL_LANGUAGE

    @property
    def supported_versions(self) -> list[str]:
        return sorted(self.readers)

    def normalize(self, payload: object, identifying_property: PropertyId) -> Draft:
        return self.build(self.read(payload), identifying_property)

    def read(self, payload: object) -> EntityInput:
        """Apply the structural rules of the payload's version. Makes no lookups."""

        version = read_version(payload, self.supported_versions)
        reader = self.readers[version]
        entity = reader(cast("Mapping[str, Any]", payload), self.default_label_language)
        log.debug(
            "Read %s payload: %d statement(s), %d label(s)",
            version,
            len(entity.statements),
            len(entity.labels),
        )
        return entity

    def build(self, entity: EntityInput, identifying_property: PropertyId) -> Draft:
        """Resolve properties and parse values of an already read payload."""

        property_ids = self.get_property_ids(entity.property_refs())

        identifying = [
            statement
            for statement in entity.statements
            if property_ids[statement.property_ref] == identifying_property
        ]
        if len(identifying) != 1:
            raise MissingOrDuplicateIdentifyingStatement(identifying_property, len(identifying))
        if identifying[0].snak_type is not SnakType.VALUE:
            raise IdentifyingStatementNotValue(identifying_property)

        datatypes: dict[PropertyId, str] = {}
        statements: list[DraftStatement] = []
        for statement in entity.statements:
            property_id = property_ids[statement.property_ref]
            statements.append(
                DraftStatement(
                    property_ref=statement.property_ref,
                    literal=statement.literal,
                    snak=self._snak_for(statement, property_id, datatypes),
                )
            )

        # checked above to be the only value snak for the identifying property
        identifying_snak = cast(
            "PropertyValueSnak",
            next(
                statement.snak
                for statement in statements
                if statement.property_id == identifying_property
            ),
        )
        return Draft(
            identifying_property=identifying_property,
            identifying_value=identifying_snak.value.literal,
            statements=tuple(statements),
            labels=dict(entity.labels),
        )

    def get_property_id(self, property_ref: str) -> PropertyId:
        return self.get_property_ids([property_ref])[property_ref]

    def get_property_ids(self, property_refs: Iterable[str]) -> dict[str, PropertyId]:
        """Resolve ids directly and labels through one resolver call."""

        resolved: dict[str, PropertyId] = {}
        labels: list[str] = []
        for ref in property_refs:
            if PropertyId.is_valid(ref):
                resolved[ref] = PropertyId(ref)
            elif ref not in labels:
                labels.append(ref)

        if labels:
            found = self.labels.ids_for_labels(labels)
            for label in labels:
                property_id = found.get(label)
                if property_id is None:
                    raise PropertyNotFound(label)
                log.debug("Resolved property label %r to %s", label, property_id)
                resolved[label] = property_id
        return resolved

    def get_datatype(self, property_id: PropertyId) -> str:
        datatype = self.datatypes.datatype_of(property_id)
        if datatype is None:
            raise PropertyDatatypeLookupError(property_id)
        return datatype

    def _snak_for(
        self,
        statement: StatementInput,
        property_id: PropertyId,
        datatypes: dict[PropertyId, str],
    ) -> Snak:
        match statement.snak_type:
            case SnakType.SOME_VALUE:
                return PropertySomeValueSnak(property_id)
            case SnakType.NO_VALUE:
                return PropertyNoValueSnak(property_id)
            case SnakType.VALUE:
                if property_id not in datatypes:
                    datatypes[property_id] = self.get_datatype(property_id)
                parse = self.parsers.parser_for(datatypes[property_id])
                return PropertyValueSnak(property_id, parse(statement.literal))
