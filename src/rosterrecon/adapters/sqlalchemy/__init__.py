"""SQLAlchemy adapter package for rosterrecon."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyOrgRepository,
    SqlAlchemyOrphanedRecordActionRepository,
    SqlAlchemyOrphanedRecordRepository,
    SqlAlchemyRosterHistoryRepository,
    SqlAlchemyRosterRepository,
    SqlAlchemyUnitRepository,
)
from .roster_entries import SqlAlchemyRosterEntryGateway
from .unit_of_work import SqlAlchemyOrphanUnitOfWork, shutdown, startup

__all__ = [
    "SqlAlchemyOrgRepository",
    "SqlAlchemyOrphanUnitOfWork",
    "SqlAlchemyOrphanedRecordActionRepository",
    "SqlAlchemyOrphanedRecordRepository",
    "SqlAlchemyRosterEntryGateway",
    "SqlAlchemyRosterHistoryRepository",
    "SqlAlchemyRosterRepository",
    "SqlAlchemyUnitRepository",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
