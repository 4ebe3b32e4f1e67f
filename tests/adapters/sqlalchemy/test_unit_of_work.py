from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from reconcile_edit.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)
from reconcile_edit.domain.model import ItemId, PropertyId
from reconcile_edit.domain.ports import ConcreteRevision, MissingRecord
from tests.helpers.records import RecordBuilder

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from sqlalchemy.engine import Engine


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_sqlalchemy_unit_of_work_requires_startup() -> None:
    assert not is_started()

    with pytest.raises(StartupError):
        SqlAlchemyUnitOfWork()


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:")
    engine_b = create_engine("sqlite+pysqlite:///:memory:")

    assert startup(engine=engine_a) is engine_a

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    assert startup(engine=engine_b, force=True) is engine_b
    assert is_started()


def test_startup_from_database_uri() -> None:
    engine = startup(database_uri="sqlite+pysqlite:///:memory:")

    assert engine.dialect.name == "sqlite"


def test_repositories_need_an_open_unit_of_work(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyUnitOfWork()

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_committed_work_is_visible_to_the_next_unit_of_work(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    record = RecordBuilder.init().with_id("Q1").with_url_value("P1", "https://a.example").item()

    with sqlite_unit_of_work() as uow:
        uow.properties.add(PropertyId("P1"), "url", {"en": "official website"})
        uow.repositories.records.save(record, base_revision_id=None, summary="create")
        uow.commit()

    with sqlite_unit_of_work() as uow:
        repositories = uow.repositories
        assert repositories.datatypes.datatype_of(PropertyId("P1")) == "url"
        assert repositories.labels.ids_for_labels(["official website"]) == {
            "official website": PropertyId("P1")
        }
        assert isinstance(repositories.revisions.latest_revision(ItemId("Q1")), ConcreteRevision)


def test_exception_rolls_back(sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork]) -> None:
    record = RecordBuilder.init().with_id("Q1").with_url_value("P1", "https://a.example").item()

    with pytest.raises(RuntimeError), sqlite_unit_of_work() as uow:
        uow.repositories.records.save(record, base_revision_id=None, summary="create")
        raise RuntimeError("boom")

    with sqlite_unit_of_work() as uow:
        assert isinstance(uow.repositories.revisions.latest_revision(ItemId("Q1")), MissingRecord)


def test_uncommitted_work_is_discarded(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
) -> None:
    with sqlite_unit_of_work() as uow:
        assert uow.repositories.id_generator.new_id("wikibase-item") == 1

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.id_generator.new_id("wikibase-item") == 1
