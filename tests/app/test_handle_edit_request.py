from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest

from reconcile_edit import app as app_module
from reconcile_edit.app import EditResponse, handle_edit_request
from reconcile_edit.config import ReconcileConfig
from reconcile_edit.domain.errors import ConsistencyFault
from reconcile_edit.domain.model import ItemId, PropertyId
from reconcile_edit.domain.ports import ConcreteRevision
from tests.helpers.records import (
    FakePropertyStore,
    FakeRecordStore,
    FakeUnitOfWork,
    make_repositories,
    string_values,
    url_records,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from reconcile_edit.adapters.sqlalchemy import SqlAlchemyUnitOfWork

URL = "https://example.org/acme"
DIRECTIVE = {"wikibasereconcileedit-version": "0.0.1", "urlReconcile": "P1"}


def entity(*statements: dict[str, Any]) -> dict[str, Any]:
    return {
        "wikibasereconcileedit-version": "0.0.1/minimal",
        "labels": {"en": "Acme"},
        "statements": list(statements),
    }


def test_response_payload_uses_camel_case_and_omits_missing_fields() -> None:
    assert EditResponse(success=True, entity_id="Q1", revision_id=3).to_payload() == {
        "success": True,
        "entityId": "Q1",
        "revisionId": 3,
    }
    failed = EditResponse(success=False, error="wikibasereconcileedit-edit-conflict")
    assert failed.to_payload() == {
        "success": False,
        "error": "wikibasereconcileedit-edit-conflict",
    }


# with in-memory fakes -----------------------------------------------------------------


@pytest.fixture
def unit_of_work(record_store: FakeRecordStore, properties: FakePropertyStore) -> FakeUnitOfWork:
    return FakeUnitOfWork(make_repositories(record_store, properties))


def test_successful_edit_commits(unit_of_work: FakeUnitOfWork) -> None:
    response = handle_edit_request(
        entity({"property": "P1", "value": URL}),
        DIRECTIVE,
        unit_of_work_factory=lambda: unit_of_work,
        config=ReconcileConfig(),
    )

    assert response == EditResponse(success=True, entity_id="Q101", revision_id=1)
    assert unit_of_work.committed
    assert not unit_of_work.rolled_back


def test_reconciliation_errors_become_failed_responses(
    unit_of_work: FakeUnitOfWork, record_store: FakeRecordStore
) -> None:
    for record in url_records(("Q1", URL), ("Q2", URL)):
        record_store.add(record)

    response = handle_edit_request(
        entity({"property": "P1", "value": URL}),
        DIRECTIVE,
        unit_of_work_factory=lambda: unit_of_work,
        config=ReconcileConfig(),
    )

    assert response.to_payload() == {
        "success": False,
        "error": "wikibasereconcileedit-multiple-items-matched",
    }
    assert unit_of_work.rolled_back
    assert not unit_of_work.committed
    assert record_store.saves == []


@pytest.mark.parametrize(
    ("entity_payload", "directive", "error"),
    [
        ({"statements": []}, DIRECTIVE, "wikibasereconcileedit-unsupported-version"),
        (entity({"value": URL}), DIRECTIVE, "wikibasereconcileedit-statements-missing-keys"),
        (
            entity({"property": "P2", "value": "Acme"}),
            DIRECTIVE,
            "wikibasereconcileedit-missing-or-duplicate-reconciliation-statement",
        ),
        (
            entity({"property": "P1", "value": URL}),
            {"wikibasereconcileedit-version": "0.0.1", "urlReconcile": "P2"},
            "wikibasereconcileedit-unexpected-datatype",
        ),
        (
            entity({"property": "P1", "value": URL}),
            {"wikibasereconcileedit-version": "0.0.1", "urlReconcile": "homepage"},
            "wikibasereconcileedit-property-not-found",
        ),
        ("not json", DIRECTIVE, "wikibasereconcileedit-malformed-payload"),
    ],
)
def test_error_keys(
    unit_of_work: FakeUnitOfWork,
    entity_payload: object,
    directive: object,
    error: str,
) -> None:
    response = handle_edit_request(
        entity_payload,
        directive,
        unit_of_work_factory=lambda: unit_of_work,
        config=ReconcileConfig(),
    )

    assert not response.success
    assert response.error == error


def test_consistency_fault_is_raised(
    unit_of_work: FakeUnitOfWork, record_store: FakeRecordStore
) -> None:
    page = record_store.add_redirect("Q3", "Q4")
    record_store.index_page(page, URL)

    with pytest.raises(ConsistencyFault):
        handle_edit_request(
            entity({"property": "P1", "value": URL}),
            DIRECTIVE,
            unit_of_work_factory=lambda: unit_of_work,
            config=ReconcileConfig(),
        )

    assert unit_of_work.rolled_back


def test_property_source_overrides_local_properties(
    unit_of_work: FakeUnitOfWork, record_store: FakeRecordStore
) -> None:
    remote = FakePropertyStore(datatypes={"P31": "url"}, labels={"website": "P31"})
    directive = {"wikibasereconcileedit-version": "0.0.1", "urlReconcile": "website"}

    response = handle_edit_request(
        entity({"property": "website", "value": URL}),
        directive,
        unit_of_work_factory=lambda: unit_of_work,
        property_source=remote,
        config=ReconcileConfig(),
    )

    assert response.success
    assert string_values(record_store.record("Q101"), "P31") == [URL]
    assert remote.calls > 0


# with the SQLAlchemy store ----------------------------------------------------------------


@pytest.fixture
def sqlite_factory(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> Callable[[], SqlAlchemyUnitOfWork]:
    with sqlite_unit_of_work() as uow:
        uow.properties.add(PropertyId("P1"), "url", {"en": "official website"})
        uow.properties.add(PropertyId("P2"), "string", {"en": "name"})
        uow.properties.add(PropertyId("P20"), "string")
        uow.properties.add(PropertyId("P30"), "string")
        uow.commit()
    return sqlite_unit_of_work


def test_create_then_update_with_sqlalchemy(
    sqlite_factory: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    created = handle_edit_request(
        entity(
            {"property": "official website", "value": URL},
            {"property": "P20", "value": "A"},
            {"property": "P30", "value": "B"},
        ),
        DIRECTIVE,
        unit_of_work_factory=sqlite_factory,
        config=ReconcileConfig(),
    )
    updated = handle_edit_request(
        entity({"property": "P1", "value": URL}, {"property": "P20", "value": "C"}),
        {"wikibasereconcileedit-version": "0.0.1", "urlReconcile": "official website"},
        unit_of_work_factory=sqlite_factory,
        config=ReconcileConfig(),
    )

    assert created.success
    assert created.entity_id == "Q1"
    assert updated.success
    assert updated.entity_id == "Q1"
    assert updated.revision_id is not None
    assert created.revision_id is not None
    assert updated.revision_id > created.revision_id

    with sqlite_factory() as uow:
        latest = uow.repositories.revisions.latest_revision(ItemId("Q1"))
    assert isinstance(latest, ConcreteRevision)
    assert latest.revision_id == updated.revision_id
    assert string_values(latest.record, "P20") == ["C"]
    assert string_values(latest.record, "P30") == ["B"]


def test_failed_edit_writes_nothing_with_sqlalchemy(
    sqlite_factory: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    response = handle_edit_request(
        entity({"property": "P1", "value": URL}, {"property": "P2", "value": ""}),
        DIRECTIVE,
        unit_of_work_factory=sqlite_factory,
        config=ReconcileConfig(),
    )

    assert response.error == "wikibasereconcileedit-statements-missing-keys"
    with sqlite_factory() as uow:
        assert uow.repositories.links.candidates_for(URL) == set()
        assert uow.repositories.id_generator.new_id("wikibase-item") == 1


@pytest.mark.parametrize("url", ["mailto:nobody", "http://x:99999/"])
def test_unindexable_identifying_url_is_rejected_every_time_with_sqlalchemy(
    sqlite_factory: Callable[[], SqlAlchemyUnitOfWork], url: str
) -> None:
    responses = [
        handle_edit_request(
            entity({"property": "P1", "value": url}),
            DIRECTIVE,
            unit_of_work_factory=sqlite_factory,
            config=ReconcileConfig(),
        )
        for _ in range(2)
    ]

    assert [response.error for response in responses] == [
        "wikibasereconcileedit-value-parse-error",
        "wikibasereconcileedit-value-parse-error",
    ]
    assert app_module.show_record(ItemId("Q1")) is None


def test_show_record_returns_latest_revision(
    sqlite_factory: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    handle_edit_request(
        entity({"property": "P1", "value": URL}),
        DIRECTIVE,
        unit_of_work_factory=sqlite_factory,
        config=ReconcileConfig(),
    )

    shown = app_module.show_record(ItemId("Q1"))

    assert shown is not None
    assert shown["id"] == "Q1"
    assert shown["labels"] == {"en": {"language": "en", "value": "Acme"}}
    assert shown["lastrevid"] == 1
    assert app_module.show_record(ItemId("Q2")) is None
