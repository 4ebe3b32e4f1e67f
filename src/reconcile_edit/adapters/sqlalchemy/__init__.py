"""SQLAlchemy record store."""

from __future__ import annotations

from .mappings import create_all_tables, metadata
from .repositories import (
    SqlAlchemyIdGenerator,
    SqlAlchemyLinkIndex,
    SqlAlchemyPageRepository,
    SqlAlchemyPropertyRepository,
)
from .unit_of_work import SqlAlchemyUnitOfWork, StartupError, shutdown, startup

__all__ = [
    "SqlAlchemyIdGenerator",
    "SqlAlchemyLinkIndex",
    "SqlAlchemyPageRepository",
    "SqlAlchemyPropertyRepository",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "create_all_tables",
    "metadata",
    "shutdown",
    "startup",
]
