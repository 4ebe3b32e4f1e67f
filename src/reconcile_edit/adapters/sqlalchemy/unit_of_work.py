"""SQLAlchemy-backed unit of work for reconciliation edits."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from reconcile_edit.adapters.sqlalchemy.mappings import create_all_tables
from reconcile_edit.adapters.sqlalchemy.repositories import (
    DEFAULT_LABEL_LANGUAGE,
    SqlAlchemyIdGenerator,
    SqlAlchemyLinkIndex,
    SqlAlchemyPageRepository,
    SqlAlchemyPropertyRepository,
)
from reconcile_edit.config.storage import get_database_config
from reconcile_edit.domain.ports import RecordRepositories

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine
    from sqlalchemy.pool import ConnectionPoolEntry


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call reconcile_edit.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def _enable_sqlite_foreign_keys(dbapi_connection: object, _record: ConnectionPoolEntry) -> None:
    cursor = dbapi_connection.cursor()  # type: ignore[attr-defined]
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> Engine:
    """Initialise the SQLAlchemy engine, create tables and reset the session factory."""

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )

    resolved_engine = engine or create_engine(database_uri or get_database_config().uri)
    if resolved_engine.dialect.name == "sqlite":
        event.listen(resolved_engine, "connect", _enable_sqlite_foreign_keys)
    create_all_tables(resolved_engine)

    _STATE.engine = resolved_engine
    return resolved_engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state (primarily for tests)."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class SqlAlchemyUnitOfWork:
    """One session, and the record repositories bound to it."""

    def __init__(self, *, label_language: str = DEFAULT_LABEL_LANGUAGE) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self.label_language = label_language
        self._session: Session | None = None
        self._repositories: RecordRepositories | None = None

    def _build_repositories(self, session: Session) -> RecordRepositories:
        properties = SqlAlchemyPropertyRepository(session, language=self.label_language)
        pages = SqlAlchemyPageRepository(session)
        return RecordRepositories(
            datatypes=properties,
            labels=properties,
            links=SqlAlchemyLinkIndex(session),
            entity_ids=pages,
            revisions=pages,
            id_generator=SqlAlchemyIdGenerator(session),
            records=pages,
        )

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        self._repositories = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> RecordRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def properties(self) -> SqlAlchemyPropertyRepository:
        """The concrete property repository, for maintenance commands."""

        return SqlAlchemyPropertyRepository(self.session, language=self.label_language)

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


if TYPE_CHECKING:
    from reconcile_edit.domain.ports import RecordUnitOfWork

    _uow_check: RecordUnitOfWork = SqlAlchemyUnitOfWork()
