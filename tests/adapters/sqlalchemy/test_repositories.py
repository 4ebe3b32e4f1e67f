from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select, update

from reconcile_edit.adapters.sqlalchemy.mappings import page_table, revision_table
from reconcile_edit.adapters.sqlalchemy.repositories import (
    SqlAlchemyIdGenerator,
    SqlAlchemyLinkIndex,
    SqlAlchemyPageRepository,
    SqlAlchemyPropertyRepository,
)
from reconcile_edit.domain.errors import StorageConflict, StorageError
from reconcile_edit.domain.model import Item, ItemId, PropertyId
from reconcile_edit.domain.ports import ConcreteRevision, MissingRecord, RedirectedRecord
from tests.helpers.records import RecordBuilder, string_values

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

URL = "https://example.org/acme"


@pytest.fixture
def pages(sqlite_session: Session) -> SqlAlchemyPageRepository:
    return SqlAlchemyPageRepository(sqlite_session)


def acme(item_id: str = "Q1", url: str = URL, name: str = "Acme") -> Item:
    return (
        RecordBuilder.init()
        .with_id(item_id)
        .with_label("en", name)
        .with_url_value("P1", url, guid=f"{item_id}$1")
        .with_string_value("P2", name, guid=f"{item_id}$2")
        .item()
    )


# properties --------------------------------------------------------------------------


def test_property_datatypes_and_labels(sqlite_session: Session) -> None:
    repo = SqlAlchemyPropertyRepository(sqlite_session)
    repo.add(PropertyId("P1"), "url", {"en": "official website", "de": "offizielle Website"})
    repo.add(PropertyId("P2"), "string", {"en": "name"})

    assert repo.datatype_of(PropertyId("P1")) == "url"
    assert repo.datatype_of(PropertyId("P3")) is None
    assert repo.ids_for_labels(["official website", "name", "colour"]) == {
        "official website": PropertyId("P1"),
        "name": PropertyId("P2"),
    }
    assert repo.ids_for_labels([]) == {}


def test_property_labels_are_read_in_the_configured_language(sqlite_session: Session) -> None:
    SqlAlchemyPropertyRepository(sqlite_session).add(
        PropertyId("P1"), "url", {"en": "official website", "de": "offizielle Website"}
    )

    german = SqlAlchemyPropertyRepository(sqlite_session, language="de")

    assert german.ids_for_labels(["official website", "offizielle Website"]) == {
        "offizielle Website": PropertyId("P1")
    }


def test_adding_a_property_again_replaces_it(sqlite_session: Session) -> None:
    repo = SqlAlchemyPropertyRepository(sqlite_session)
    repo.add(PropertyId("P1"), "string", {"en": "homepage"})
    repo.add(PropertyId("P1"), "url", {"en": "official website"})

    assert repo.datatype_of(PropertyId("P1")) == "url"
    assert repo.ids_for_labels(["homepage"]) == {}


# pages and revisions ------------------------------------------------------------------


def test_save_new_record_and_read_it_back(pages: SqlAlchemyPageRepository) -> None:
    result = pages.save(acme(), base_revision_id=None, summary="create")

    assert result.item_id == ItemId("Q1")
    assert result.created

    loaded = pages.latest_revision(ItemId("Q1"))
    assert isinstance(loaded, ConcreteRevision)
    assert loaded.revision_id == result.revision_id
    assert loaded.record == acme()


def test_unknown_record_is_missing(pages: SqlAlchemyPageRepository) -> None:
    assert pages.latest_revision(ItemId("Q404")) == MissingRecord(item_id=ItemId("Q404"))
    assert pages.entity_id_for(404) is None


def test_saved_links_are_indexed(sqlite_session: Session, pages: SqlAlchemyPageRepository) -> None:
    pages.save(acme(), base_revision_id=None, summary="create")
    links = SqlAlchemyLinkIndex(sqlite_session)

    (page,) = links.candidates_for(URL)

    assert pages.entity_id_for(page) == ItemId("Q1")
    assert links.candidates_for("https://EXAMPLE.org/acme") == {page}
    assert links.candidates_for("https://example.org/other") == set()
    assert links.candidates_for("Acme") == set()


def test_update_appends_a_revision_and_reindexes_links(
    sqlite_session: Session, pages: SqlAlchemyPageRepository
) -> None:
    created = pages.save(acme(), base_revision_id=None, summary="create")
    moved = "https://acme.example.com/"

    updated = pages.save(
        acme(url=moved, name="Acme Corp"),
        base_revision_id=created.revision_id,
        summary="update",
    )

    assert not updated.created
    assert updated.revision_id > created.revision_id
    loaded = pages.latest_revision(ItemId("Q1"))
    assert isinstance(loaded, ConcreteRevision)
    assert string_values(loaded.record, "P2") == ["Acme Corp"]

    links = SqlAlchemyLinkIndex(sqlite_session)
    assert links.candidates_for(URL) == set()
    assert len(links.candidates_for(moved)) == 1

    parents = sqlite_session.execute(
        select(revision_table.c.parent_id).order_by(revision_table.c.id)
    ).scalars()
    assert list(parents) == [None, created.revision_id]


def test_stale_base_revision_is_a_conflict(pages: SqlAlchemyPageRepository) -> None:
    created = pages.save(acme(), base_revision_id=None, summary="create")
    pages.save(acme(name="First"), base_revision_id=created.revision_id, summary="first")

    with pytest.raises(StorageConflict):
        pages.save(acme(name="Second"), base_revision_id=created.revision_id, summary="second")

    loaded = pages.latest_revision(ItemId("Q1"))
    assert isinstance(loaded, ConcreteRevision)
    assert loaded.record.labels == {"en": "First"}


def test_creating_an_existing_record_is_a_conflict(pages: SqlAlchemyPageRepository) -> None:
    pages.save(acme(), base_revision_id=None, summary="create")

    with pytest.raises(StorageConflict):
        pages.save(acme(), base_revision_id=None, summary="create again")


def test_updating_a_missing_record_is_a_conflict(pages: SqlAlchemyPageRepository) -> None:
    with pytest.raises(StorageConflict):
        pages.save(acme(), base_revision_id=7, summary="update")


def test_record_without_id_cannot_be_saved(pages: SqlAlchemyPageRepository) -> None:
    with pytest.raises(StorageError):
        pages.save(Item(), base_revision_id=None, summary="create")


def test_redirected_record(pages: SqlAlchemyPageRepository, sqlite_session: Session) -> None:
    pages.save(acme("Q1"), base_revision_id=None, summary="create")
    pages.save(acme("Q2", url="https://example.org/b"), base_revision_id=None, summary="create")

    sqlite_session.execute(
        update(page_table).where(page_table.c.title == "Q1").values(redirect_target="Q2")
    )

    assert pages.latest_revision(ItemId("Q1")) == RedirectedRecord(
        source=ItemId("Q1"), target=ItemId("Q2")
    )


# id generation ---------------------------------------------------------------------


def test_id_generator_counts_per_kind(sqlite_session: Session) -> None:
    generator = SqlAlchemyIdGenerator(sqlite_session)

    assert [generator.new_id("wikibase-item") for _ in range(3)] == [1, 2, 3]
    assert generator.new_id("wikibase-property") == 1
    assert generator.new_id("wikibase-item") == 4
