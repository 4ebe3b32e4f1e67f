"""SQLAlchemy table metadata for the record store.

Records are stored the way a Wikibase repository stores them: a page per entity, an
append-only revision table holding the serialized entity, and secondary tables
(external links, property labels) that are rebuilt on every save.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

# Properties ------------------------------------------------------------------

property_table = Table(
    "property",
    metadata,
    Column("id", String(16), primary_key=True),
    Column("datatype", String(64), nullable=False),
)

property_label_table = Table(
    "property_label",
    metadata,
    Column(
        "property_id",
        String(16),
        ForeignKey("property.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("language", String(32), primary_key=True),
    Column("label", String(400), nullable=False),
    UniqueConstraint("language", "label"),
)

# Pages and revisions ------------------------------------------------------------

page_table = Table(
    "page",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(16), nullable=False, unique=True),
    Column("entity_kind", String(16), nullable=False),
    Column("latest_revision_id", Integer, nullable=True),
    Column("redirect_target", String(16), nullable=True),
)

revision_table = Table(
    "revision",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("page_id", Integer, ForeignKey("page.id", ondelete="CASCADE"), nullable=False),
    Column("parent_id", Integer, nullable=True),
    Column("content", JSON, nullable=False),
    Column("summary", Text, nullable=False, default=""),
    Column("timestamp", UTCDateTime, nullable=False, default=lambda: datetime.now(UTC)),
    Index("ix_revision_page_id", "page_id"),
)

external_link_table = Table(
    "external_link",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("page_id", Integer, ForeignKey("page.id", ondelete="CASCADE"), nullable=False),
    Column("url", Text, nullable=False),
    Column("index_key", Text, nullable=False),
    Index("ix_external_link_index_key", "index_key"),
    Index("ix_external_link_page_id", "page_id"),
)

id_counter_table = Table(
    "id_counter",
    metadata,
    Column("kind", String(32), primary_key=True),
    Column("last_id", Integer, nullable=False),
)


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the record store metadata."""

    log.info("Creating all tables")
    metadata.create_all(engine)
