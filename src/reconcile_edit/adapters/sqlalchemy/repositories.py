"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from reconcile_edit.adapters.sqlalchemy.mappings import (
    external_link_table,
    id_counter_table,
    page_table,
    property_label_table,
    property_table,
    revision_table,
)
from reconcile_edit.domain.errors import StorageConflict, StorageError
from reconcile_edit.domain.links import make_link_index, record_links
from reconcile_edit.domain.model import InvalidEntityIdError, ItemId, PropertyId, parse_entity_id
from reconcile_edit.domain.ports import (
    ConcreteRevision,
    MissingRecord,
    RedirectedRecord,
    SaveResult,
)
from reconcile_edit.domain.serialization import (
    SerializationError,
    deserialize_item,
    serialize_item,
)

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from sqlalchemy.engine import CursorResult
    from sqlalchemy.orm import Session

    from reconcile_edit.domain.model import Item
    from reconcile_edit.domain.ports import PageRef, RevisionId, RevisionLookupResult

log = getLogger(__name__)

DEFAULT_LABEL_LANGUAGE = "en"


class SqlAlchemyPropertyRepository:
    """Property datatypes and labels; implements both property ports."""

    def __init__(self, session: Session, *, language: str = DEFAULT_LABEL_LANGUAGE) -> None:
        self.session = session
        self.language = language

    def add(
        self,
        property_id: PropertyId,
        datatype: str,
        labels: Mapping[str, str] | None = None,
    ) -> None:
        """Create or replace a property definition."""

        self.session.execute(
            delete(property_label_table).where(
                property_label_table.c.property_id == property_id.serialization
            )
        )
        self.session.execute(
            delete(property_table).where(property_table.c.id == property_id.serialization)
        )
        self.session.execute(
            insert(property_table).values(id=property_id.serialization, datatype=datatype)
        )
        if labels:
            self.session.execute(
                insert(property_label_table),
                [
                    {"property_id": property_id.serialization, "language": language, "label": label}
                    for language, label in labels.items()
                ],
            )

    def datatype_of(self, property_id: PropertyId) -> str | None:
        stmt = select(property_table.c.datatype).where(
            property_table.c.id == property_id.serialization
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def ids_for_labels(self, labels: Sequence[str]) -> dict[str, PropertyId]:
        if not labels:
            return {}
        stmt = (
            select(property_label_table.c.label, property_label_table.c.property_id)
            .where(property_label_table.c.language == self.language)
            .where(property_label_table.c.label.in_(list(labels)))
        )
        return {label: PropertyId(property_id) for label, property_id in self.session.execute(stmt)}


class SqlAlchemyLinkIndex:
    def __init__(self, session: Session) -> None:
        self.session = session

    def candidates_for(self, value: str) -> set[PageRef]:
        index_key = make_link_index(value)
        if index_key is None:
            return set()
        stmt = select(external_link_table.c.page_id).where(
            external_link_table.c.index_key == index_key
        )
        return set(self.session.execute(stmt).scalars())


class SqlAlchemyPageRepository:
    """Pages and their revisions.

    Implements ``EntityIdLookup``, ``RevisionLookup`` and ``RecordStore``. A save
    appends a revision and moves the page's ``latest_revision_id`` with a conditional
    UPDATE, so two writers based on the same revision cannot both succeed.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def entity_id_for(self, page: PageRef) -> ItemId | PropertyId | None:
        stmt = select(page_table.c.title).where(page_table.c.id == page)
        title = self.session.execute(stmt).scalar_one_or_none()
        if title is None:
            return None
        try:
            return parse_entity_id(title)
        except InvalidEntityIdError:
            log.warning("Page %s has a title that is not an entity id: %r", page, title)
            return None

    def latest_revision(self, item_id: ItemId) -> RevisionLookupResult:
        page = self.session.execute(
            select(page_table.c.latest_revision_id, page_table.c.redirect_target).where(
                page_table.c.title == item_id.serialization
            )
        ).one_or_none()
        if page is None:
            return MissingRecord(item_id=item_id)
        if page.redirect_target is not None:
            return RedirectedRecord(source=item_id, target=ItemId(page.redirect_target))
        if page.latest_revision_id is None:
            return MissingRecord(item_id=item_id)

        content = self.session.execute(
            select(revision_table.c.content).where(revision_table.c.id == page.latest_revision_id)
        ).scalar_one()
        try:
            record = deserialize_item(cast("dict[str, Any]", content))
        except SerializationError as exc:
            raise StorageError(f"Stored revision {page.latest_revision_id} is unreadable") from exc
        return ConcreteRevision(record=record, revision_id=page.latest_revision_id)

    def save(
        self,
        record: Item,
        *,
        base_revision_id: RevisionId | None,
        summary: str,
    ) -> SaveResult:
        if record.id is None:
            raise StorageError("Cannot save a record without an id")
        item_id = record.id

        try:
            page_id = (
                self._create_page(item_id)
                if base_revision_id is None
                else self._existing_page_id(item_id)
            )
            revision_id = self.session.execute(
                insert(revision_table).values(
                    page_id=page_id,
                    parent_id=base_revision_id,
                    content=serialize_item(record),
                    summary=summary,
                )
            ).inserted_primary_key[0]

            current = page_table.c.latest_revision_id
            swapped = cast(
                "CursorResult[Any]",
                self.session.execute(
                    update(page_table)
                    .where(page_table.c.id == page_id)
                    .where(
                        current.is_(None)
                        if base_revision_id is None
                        else current == base_revision_id
                    )
                    .values(latest_revision_id=revision_id)
                ),
            )
            if swapped.rowcount != 1:
                raise StorageConflict(
                    f"{item_id} changed since revision {base_revision_id}; edit rejected"
                )
            self._reindex_links(page_id, record)
        except IntegrityError as exc:
            raise StorageConflict(f"{item_id} was created concurrently") from exc
        except SQLAlchemyError as exc:
            raise StorageError(f"Saving {item_id} failed: {exc}") from exc

        log.info("Saved %s at revision %s (parent %s)", item_id, revision_id, base_revision_id)
        return SaveResult(
            item_id=item_id,
            revision_id=int(revision_id),
            created=base_revision_id is None,
        )

    def _create_page(self, item_id: ItemId) -> int:
        exists = self.session.execute(
            select(page_table.c.id).where(page_table.c.title == item_id.serialization)
        ).scalar_one_or_none()
        if exists is not None:
            raise StorageConflict(f"{item_id} already exists")
        result = self.session.execute(
            insert(page_table).values(title=item_id.serialization, entity_kind=str(item_id.kind))
        )
        return int(result.inserted_primary_key[0])

    def _existing_page_id(self, item_id: ItemId) -> int:
        page_id = self.session.execute(
            select(page_table.c.id).where(page_table.c.title == item_id.serialization)
        ).scalar_one_or_none()
        if page_id is None:
            raise StorageConflict(f"{item_id} no longer exists")
        return int(page_id)

    def _reindex_links(self, page_id: int, record: Item) -> None:
        self.session.execute(
            delete(external_link_table).where(external_link_table.c.page_id == page_id)
        )
        rows = [
            {"page_id": page_id, "url": url, "index_key": make_link_index(url)}
            for url in record_links(record)
        ]
        if rows:
            self.session.execute(insert(external_link_table), rows)


class SqlAlchemyIdGenerator:
    """Per-kind counters in the ``id_counter`` table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def new_id(self, kind: str) -> int:
        counter = id_counter_table.c.last_id
        bumped = cast(
            "CursorResult[Any]",
            self.session.execute(
                update(id_counter_table)
                .where(id_counter_table.c.kind == kind)
                .values(last_id=counter + 1)
            ),
        )
        if bumped.rowcount == 0:
            self.session.execute(insert(id_counter_table).values(kind=kind, last_id=1))
            return 1
        return int(
            self.session.execute(
                select(counter).where(id_counter_table.c.kind == kind)
            ).scalar_one()
        )
