"""Application entry points.

``handle_edit_request`` is the single boundary of an edit: it wires adapters, runs the
pipeline inside a unit of work and turns reconciliation errors into responses.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

from reconcile_edit.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    is_started,
    startup,
)
from reconcile_edit.adapters.wikibase import (
    WikibaseClient,
    WikibasePropertySource,
    should_cache_payload,
)
from reconcile_edit.config import (
    get_reconcile_config,
    get_wikibase_config,
    is_wikibase_configured,
)
from reconcile_edit.domain.errors import ConsistencyFault, ReconciliationError
from reconcile_edit.domain.ports import (
    ConcreteRevision,
    PropertyDatatypeLookup,
    PropertyLabelResolver,
    RecordUnitOfWork,
)
from reconcile_edit.domain.serialization import serialize_item
from reconcile_edit.pipeline import build_pipeline

if TYPE_CHECKING:
    from collections.abc import Mapping

    from reconcile_edit.config import ReconcileConfig
    from reconcile_edit.domain.model import ItemId, PropertyId

UnitOfWorkFactory = Callable[[], RecordUnitOfWork]

log = getLogger(__name__)


class PropertySource(PropertyDatatypeLookup, PropertyLabelResolver, Protocol):
    """Both property ports from one collaborator."""


class EditResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    success: bool
    entity_id: str | None = Field(default=None, alias="entityId")
    revision_id: int | None = Field(default=None, alias="revisionId")
    error: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def default_unit_of_work_factory(config: ReconcileConfig) -> UnitOfWorkFactory:
    if not is_started():
        startup()
    return partial(SqlAlchemyUnitOfWork, label_language=config.default_label_language)


def default_property_source() -> PropertySource | None:
    """Remote Wikibase property source when ``WIKIBASE_API_URL`` is set."""

    if not is_wikibase_configured():
        return None
    config = get_wikibase_config(cache_predicate=should_cache_payload)
    log.info("Reading property metadata from %s", config.api_url)
    return WikibasePropertySource(client=WikibaseClient(config=config))


def handle_edit_request(
    entity_payload: object,
    reconcile_payload: object,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    property_source: PropertySource | None = None,
    config: ReconcileConfig | None = None,
) -> EditResponse:
    """Create or update the record identified by ``reconcile_payload``.

    Returns ``success=False`` with a message key for every reconciliation error; the
    unit of work is rolled back and nothing is written. A ``ConsistencyFault`` is
    logged and re-raised.
    """

    effective_config = config or get_reconcile_config()
    effective_uow = unit_of_work_factory or default_unit_of_work_factory(effective_config)

    try:
        with effective_uow() as uow:
            pipeline = build_pipeline(
                uow.repositories,
                config=effective_config,
                datatypes=property_source,
                labels=property_source,
            )
            outcome = pipeline.run(entity_payload, reconcile_payload)
            uow.commit()
    except ReconciliationError as exc:
        log.info("Edit rejected (%s): %s", exc.message_key, exc)
        return EditResponse(success=False, error=exc.message_key)
    except ConsistencyFault:
        log.exception("Edit aborted: collaborators disagree")
        raise

    log.info(
        "%s %s at revision %s",
        "Created" if outcome.created else "Updated",
        outcome.item_id,
        outcome.revision_id,
    )
    return EditResponse(
        success=True,
        entity_id=outcome.item_id.serialization,
        revision_id=outcome.revision_id,
    )


def init_database(*, database_uri: str | None = None) -> None:
    startup(database_uri=database_uri, force=is_started())
    log.info("Database ready")


def add_property(
    property_id: PropertyId,
    datatype: str,
    labels: Mapping[str, str] | None = None,
) -> None:
    """Define a property in the local record store."""

    if not is_started():
        startup()
    with SqlAlchemyUnitOfWork() as uow:
        uow.properties.add(property_id, datatype, labels)
        uow.commit()
    log.info("Stored property %s (%s)", property_id, datatype)


def show_record(item_id: ItemId) -> dict[str, Any] | None:
    """Return the latest stored revision of ``item_id`` in Wikibase JSON, if any."""

    if not is_started():
        startup()
    with SqlAlchemyUnitOfWork() as uow:
        result = uow.repositories.revisions.latest_revision(item_id)
    if not isinstance(result, ConcreteRevision):
        log.info("%s is %s", item_id, result.status)
        return None
    payload = serialize_item(result.record)
    payload["lastrevid"] = result.revision_id
    return payload
