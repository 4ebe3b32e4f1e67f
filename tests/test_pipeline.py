from __future__ import annotations

from typing import Any

import pytest

from reconcile_edit.config import ReconcileConfig
from reconcile_edit.domain.errors import (
    AmbiguousMatch,
    StatementsMissingKeys,
    StorageConflict,
    UnexpectedDatatype,
    UnsupportedVersion,
)
from reconcile_edit.domain.model import Item, ItemId
from reconcile_edit.domain.ports import SaveResult
from reconcile_edit.pipeline import EditPipeline, build_pipeline
from tests.helpers.records import (
    FakePropertyStore,
    FakeRecordStore,
    RecordBuilder,
    make_repositories,
    string_values,
    url_records,
)

URL = "https://example.org/acme"
DIRECTIVE = {"wikibasereconcileedit-version": "0.0.1", "urlReconcile": "P1"}


def entity(*statements: dict[str, Any], labels: dict[str, str] | None = None) -> dict[str, Any]:
    return {
        "wikibasereconcileedit-version": "0.0.1/minimal",
        "labels": labels or {},
        "statements": list(statements),
    }


@pytest.fixture
def pipeline(record_store: FakeRecordStore, properties: FakePropertyStore) -> EditPipeline:
    return build_pipeline(
        make_repositories(record_store, properties),
        config=ReconcileConfig(),
    )


def test_no_match_creates_a_record(pipeline: EditPipeline, record_store: FakeRecordStore) -> None:
    outcome = pipeline.run(
        entity({"property": "P1", "value": URL}, labels={"en": "Acme"}),
        DIRECTIVE,
    )

    assert outcome.created
    assert outcome.item_id == ItemId("Q101")
    stored = record_store.record("Q101")
    assert stored.labels == {"en": "Acme"}
    assert string_values(stored, "P1") == [URL]
    assert record_store.saves == [(outcome.record, None)]


def test_single_match_updates_the_record(
    pipeline: EditPipeline, record_store: FakeRecordStore
) -> None:
    record_store.add(
        RecordBuilder.init()
        .with_id("Q1")
        .with_url_value("P1", URL)
        .with_string_value("P20", "A")
        .with_string_value("P30", "B")
        .item()
    )

    outcome = pipeline.run(
        entity({"property": "P1", "value": URL}, {"property": "P20", "value": "C"}),
        DIRECTIVE,
    )

    assert not outcome.created
    assert outcome.item_id == ItemId("Q1")
    assert record_store.saves[0][1] == 1
    stored = record_store.record("Q1")
    assert string_values(stored, "P20") == ["C"]
    assert string_values(stored, "P30") == ["B"]


def test_same_edit_twice_updates_instead_of_duplicating(
    pipeline: EditPipeline, record_store: FakeRecordStore
) -> None:
    payload = entity({"property": "P1", "value": URL}, {"property": "P2", "value": "Acme"})

    first = pipeline.run(payload, DIRECTIVE)
    second = pipeline.run(payload, DIRECTIVE)

    assert first.item_id == second.item_id
    assert second.revision_id > first.revision_id
    assert string_values(record_store.record(str(first.item_id)), "P2") == ["Acme"]


def test_ambiguous_match_never_writes(
    pipeline: EditPipeline, record_store: FakeRecordStore
) -> None:
    for record in url_records(("Q1", URL), ("Q2", URL)):
        record_store.add(record)

    with pytest.raises(AmbiguousMatch):
        pipeline.run(entity({"property": "P1", "value": URL}), DIRECTIVE)

    assert record_store.saves == []


def test_invalid_entity_is_rejected_before_any_lookup(
    pipeline: EditPipeline, record_store: FakeRecordStore, properties: FakePropertyStore
) -> None:
    with pytest.raises(StatementsMissingKeys):
        pipeline.run(entity({"property": "P1"}), DIRECTIVE)

    assert properties.calls == 0
    assert record_store.links_calls == []


def test_directive_is_read_first(
    pipeline: EditPipeline, record_store: FakeRecordStore, properties: FakePropertyStore
) -> None:
    with pytest.raises(UnsupportedVersion):
        pipeline.run(entity({"property": "P1"}), {"urlReconcile": "P1"})

    assert properties.calls == 0


def test_identifying_property_must_be_a_url(
    pipeline: EditPipeline, record_store: FakeRecordStore
) -> None:
    directive = {"wikibasereconcileedit-version": "0.0.1", "urlReconcile": "P2"}

    with pytest.raises(UnexpectedDatatype):
        pipeline.run(entity({"property": "P2", "value": "Acme"}), directive)

    assert record_store.links_calls == []


class InterceptingStore:
    """Wrap a record store, recording summaries and optionally racing another writer."""

    def __init__(self, store: FakeRecordStore, *, concurrent_revision: int | None = None) -> None:
        self.store = store
        self.concurrent_revision = concurrent_revision
        self.summaries: list[str] = []

    def save(self, record: Item, *, base_revision_id: int | None, summary: str) -> SaveResult:
        self.summaries.append(summary)
        if self.concurrent_revision is not None:
            for page in self.store.pages.values():
                if page.title == record.id:
                    page.revision_id = self.concurrent_revision
        return self.store.save(record, base_revision_id=base_revision_id, summary=summary)


def test_stale_base_is_a_conflict(pipeline: EditPipeline, record_store: FakeRecordStore) -> None:
    (record,) = url_records(("Q1", URL))
    record_store.add(record)
    pipeline.store = InterceptingStore(record_store, concurrent_revision=99)

    with pytest.raises(StorageConflict):
        pipeline.run(entity({"property": "P1", "value": URL}), DIRECTIVE)

    assert string_values(record_store.record("Q1"), "P1") == [URL]


def test_summary_names_the_identifying_statement(
    record_store: FakeRecordStore, properties: FakePropertyStore
) -> None:
    pipeline = build_pipeline(
        make_repositories(record_store, properties),
        config=ReconcileConfig(edit_summary="Imported"),
    )
    store = InterceptingStore(record_store)
    pipeline.store = store

    pipeline.run(entity({"property": "P1", "value": URL}), DIRECTIVE)

    assert store.summaries == [f"Imported (new): P1={URL}"]
