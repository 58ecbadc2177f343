"""SQLAlchemy mapping metadata for the roster reconciliation domain model."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    orm,
)
from sqlalchemy.orm import configure_mappers

from rosterrecon.domain.model import (
    ActionType,
    ChangeType,
    Org,
    OrphanedRecord,
    OrphanedRecordAction,
    Roster,
    RosterHistory,
    Unit,
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


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Roster tables ---------------------------------------------------------------

org_table = Table(
    "org",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, nullable=False),
    Column("reporting_group", String, nullable=True, unique=True),
)

unit_table = Table(
    "unit",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("org_id", Integer, ForeignKey("org.id", ondelete="CASCADE"), nullable=False),
    Column("name", String, nullable=False),
)

roster_table = Table(
    "roster",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("edipi", String, nullable=False),
    Column("unit_id", Integer, ForeignKey("unit.id", ondelete="CASCADE"), nullable=False),
    Column("first_name", String, nullable=True),
    Column("last_name", String, nullable=True),
    Column("phone_number", String, nullable=True),
    UniqueConstraint("edipi", "unit_id"),
)

roster_history_table = Table(
    "roster_history",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("edipi", String, nullable=False),
    Column("unit_id", Integer, ForeignKey("unit.id", ondelete="CASCADE"), nullable=False),
    Column("change_type", Enum(ChangeType, native_enum=False), nullable=False),
    Column("timestamp", UTCDateTime(), nullable=False),
    Index("ix_roster_history_unit_edipi", "unit_id", "edipi"),
)

# Orphan tables ---------------------------------------------------------------

orphaned_record_table = Table(
    "orphaned_record",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("document_id", String, nullable=False),
    Column("edipi", String, nullable=False),
    Column("phone", String, nullable=True),
    Column("unit", String, nullable=True),
    Column("timestamp", UTCDateTime(), nullable=False),
    Column("org_id", Integer, ForeignKey("org.id", ondelete="CASCADE"), nullable=False),
    Column("composite_id", String, nullable=False),
    Column("deleted_on", UTCDateTime(), nullable=True),
    Index("ix_orphaned_record_composite_id", "composite_id"),
    Index("ix_orphaned_record_document_id", "document_id"),
)

orphaned_record_action_table = Table(
    "orphaned_record_action",
    mapper_registry.metadata,
    Column("composite_id", String, primary_key=True),
    Column("user_edipi", String, primary_key=True),
    Column("type", Enum(ActionType, native_enum=False), nullable=False),
    Column("expires_on", UTCDateTime(), nullable=True),
)


@cache
def start_mappers() -> orm.registry:
    """Map the domain dataclasses onto their tables (idempotent)."""

    mapper_registry.map_imperatively(Org, org_table)
    mapper_registry.map_imperatively(Unit, unit_table)
    mapper_registry.map_imperatively(Roster, roster_table)
    mapper_registry.map_imperatively(RosterHistory, roster_history_table)
    mapper_registry.map_imperatively(OrphanedRecord, orphaned_record_table)
    mapper_registry.map_imperatively(OrphanedRecordAction, orphaned_record_action_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
