"""Error taxonomy for reconciliation edits.

Every user-facing failure is a ``ReconciliationError`` carrying a stable message key.
The application boundary turns it into ``{"success": false, "error": <key>}``.
``ConsistencyFault`` is deliberately outside that hierarchy: it signals corrupt
collaborator state rather than bad input.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from collections.abc import Sequence

    from reconcile_edit.domain.model import ItemId, PropertyId

MESSAGE_KEY_PREFIX = "wikibasereconcileedit-"


class ReconciliationError(Exception):
    """Base class for failures reported back to the caller."""

    KEY: ClassVar[str] = "error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message_key)

    @property
    def message_key(self) -> str:
        return f"{MESSAGE_KEY_PREFIX}{self.KEY}"


# Input errors -----------------------------------------------------------------


class InputError(ReconciliationError):
    """The payload cannot be read at all."""

    KEY = "invalid-input"


class MalformedPayload(InputError):
    KEY = "malformed-payload"


class UnsupportedVersion(InputError):
    KEY = "unsupported-version"

    def __init__(self, version: object, *, supported: Sequence[str] = ()) -> None:
        self.version = version
        self.supported = tuple(supported)
        choices = ", ".join(self.supported) or "none"
        super().__init__(f"Unsupported version {version!r} (supported: {choices})")


class UnsupportedEntityType(InputError):
    KEY = "unsupported-entity-type"

    def __init__(self, entity_type: object) -> None:
        self.entity_type = entity_type
        super().__init__(f"Only supported entity type is 'item', got {entity_type!r}")


# Validation errors ------------------------------------------------------------


class ValidationError(ReconciliationError):
    """The payload is readable but describes something this system does not accept."""

    KEY = "invalid-entity"


class StatementsMissingKeys(ValidationError):
    KEY = "statements-missing-keys"

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"Statement #{index} needs both a property and a value")


class UnsupportedAnnotation(ValidationError):
    KEY = "unsupported-annotation"

    def __init__(self, property_ref: str) -> None:
        self.property_ref = property_ref
        super().__init__(
            f"Qualifiers and references are not supported (statement on {property_ref})"
        )


class UnsupportedSitelinks(ValidationError):
    KEY = "unsupported-sitelinks"

    def __init__(self) -> None:
        super().__init__("Sitelinks are not supported")


class MissingOrDuplicateIdentifyingStatement(ValidationError):
    KEY = "missing-or-duplicate-reconciliation-statement"

    def __init__(self, property_id: PropertyId, count: int) -> None:
        self.property_id = property_id
        self.count = count
        super().__init__(
            f"Entity must have exactly one statement for {property_id}, found {count}"
        )


class IdentifyingStatementNotValue(ValidationError):
    KEY = "reconciliation-statement-not-value"

    def __init__(self, property_id: PropertyId) -> None:
        self.property_id = property_id
        super().__init__(f"Statement for {property_id} must be of snak type 'value'")


# Property resolution ----------------------------------------------------------


class PropertyResolutionError(ReconciliationError):
    KEY = "property-resolution-error"


class PropertyNotFound(PropertyResolutionError):
    KEY = "property-not-found"

    def __init__(self, property_ref: str) -> None:
        self.property_ref = property_ref
        super().__init__(f"No property found for {property_ref!r}")


class AmbiguousProperty(PropertyResolutionError):
    KEY = "property-ambiguous"

    def __init__(self, property_ref: str, candidates: Sequence[PropertyId]) -> None:
        self.property_ref = property_ref
        self.candidates = tuple(candidates)
        listed = ", ".join(str(candidate) for candidate in self.candidates)
        super().__init__(f"Label {property_ref!r} matches several properties: {listed}")


# Datatypes ----------------------------------------------------------------------


class DatatypeError(ReconciliationError):
    KEY = "datatype-error"


class PropertyDatatypeLookupError(DatatypeError):
    KEY = "property-datatype-lookup-error"

    def __init__(self, property_id: PropertyId) -> None:
        self.property_id = property_id
        super().__init__(f"Could not look up the datatype of {property_id}")


class UnexpectedDatatype(DatatypeError):
    KEY = "unexpected-datatype"

    def __init__(self, property_id: PropertyId, *, expected: str, actual: str) -> None:
        self.property_id = property_id
        self.expected = expected
        self.actual = actual
        super().__init__(f"{property_id} must be of type {expected}, not {actual}")


class UnsupportedDatatype(DatatypeError):
    KEY = "unsupported-datatype"

    def __init__(self, datatype: str) -> None:
        self.datatype = datatype
        super().__init__(f"No value parser for datatype {datatype!r}")


class ValueParseError(DatatypeError):
    KEY = "value-parse-error"

    def __init__(self, datatype: str, literal: object, reason: str) -> None:
        self.datatype = datatype
        self.literal = literal
        super().__init__(f"Cannot parse {literal!r} as {datatype}: {reason}")


# Reconciliation and storage ----------------------------------------------------------


class AmbiguousMatch(ReconciliationError):
    KEY = "multiple-items-matched"

    def __init__(self, identifying_value: str, matches: Sequence[ItemId]) -> None:
        self.identifying_value = identifying_value
        self.matches = tuple(matches)
        listed = ", ".join(str(match) for match in self.matches)
        super().__init__(f"Matched multiple items for {identifying_value!r}: {listed}")


class StorageConflict(ReconciliationError):
    KEY = "edit-conflict"


class StorageError(ReconciliationError):
    KEY = "save-failed"


class ConsistencyFault(RuntimeError):
    """Raised when collaborators disagree, e.g. the index points at a redirect."""
