"""Reconciliation directive: which property identifies the record to edit."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, cast

from reconcile_edit.domain.errors import UnexpectedDatatype
from reconcile_edit.domain.model import Datatype
from reconcile_edit.input.formats import read_version, validate_payload
from reconcile_edit.input.schema import DirectivePayload

if TYPE_CHECKING:
    from collections.abc import Mapping

    from reconcile_edit.domain.model import PropertyId
    from reconcile_edit.input.normalizer import InputNormalizer

DIRECTIVE_VERSIONS = ("0.0.1",)


@dataclass(frozen=True, slots=True)
class DirectiveInput:
    version: str
    property_ref: str


@dataclass(frozen=True, slots=True)
class ReconciliationDirective:
    version: str
    identifying_property: PropertyId
    datatype: str


@dataclass(slots=True)
class DirectiveReader:
    required_datatype: str = Datatype.URL
    versions: tuple[str, ...] = DIRECTIVE_VERSIONS

    def read(self, payload: object) -> DirectiveInput:
        version = read_version(payload, self.versions)
        directive = validate_payload(DirectivePayload, cast("Mapping[str, Any]", payload))
        return DirectiveInput(version=version, property_ref=directive.identifying_property)

    def resolve(
        self, directive: DirectiveInput, normalizer: InputNormalizer
    ) -> ReconciliationDirective:
        property_id = normalizer.get_property_id(directive.property_ref)
        datatype = normalizer.get_datatype(property_id)
        if datatype != self.required_datatype:
            raise UnexpectedDatatype(property_id, expected=self.required_datatype, actual=datatype)
        return ReconciliationDirective(
            version=directive.version,
            identifying_property=property_id,
            datatype=datatype,
        )
