"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm.attributes import set_committed_value

from rosterrecon.adapters.sqlalchemy.mappings import (
    org_table,
    orphaned_record_action_table,
    orphaned_record_table,
    roster_table,
)
from rosterrecon.adapters.sqlalchemy.queries import (
    roster_history_since,
    visible_orphans_statement,
)
from rosterrecon.domain.model import (
    Org,
    OrphanedRecord,
    OrphanedRecordAction,
    Roster,
    RosterHistory,
    Unit,
    VisibleOrphan,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from sqlalchemy import ColumnElement, CursorResult
    from sqlalchemy.orm import Session

    from rosterrecon.domain.model import ActionType


class SqlAlchemyOrphanedRecordRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: OrphanedRecord) -> None:
        self.session.add(entity)

    def find_by_document_id(self, document_id: str) -> OrphanedRecord | None:
        stmt = (
            select(OrphanedRecord)
            .where(orphaned_record_table.c.document_id == document_id)
            .order_by(orphaned_record_table.c.id)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_active(
        self, composite_id: str, *, for_update: bool = False
    ) -> Sequence[OrphanedRecord]:
        stmt = (
            select(OrphanedRecord)
            .where(orphaned_record_table.c.composite_id == composite_id)
            .where(orphaned_record_table.c.deleted_on.is_(None))
            .order_by(orphaned_record_table.c.id)
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.session.execute(stmt).scalars().all()

    def earliest_timestamp(self, composite_id: str) -> datetime | None:
        stmt = select(func.min(orphaned_record_table.c.timestamp)).where(
            orphaned_record_table.c.composite_id == composite_id,
            orphaned_record_table.c.deleted_on.is_(None),
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def soft_delete(self, record: OrphanedRecord, *, at: datetime) -> bool:
        stmt = (
            update(orphaned_record_table)
            .where(orphaned_record_table.c.id == record.id)
            .where(orphaned_record_table.c.deleted_on.is_(None))
            .values(deleted_on=at)
        )
        result = cast("CursorResult[tuple[()]]", self.session.execute(stmt))
        if result.rowcount != 1:
            return False
        set_committed_value(record, "deleted_on", at)
        return True

    def soft_delete_group(self, composite_id: str, *, at: datetime) -> int:
        stmt = (
            update(orphaned_record_table)
            .where(orphaned_record_table.c.composite_id == composite_id)
            .where(orphaned_record_table.c.deleted_on.is_(None))
            .values(deleted_on=at)
        )
        result = cast("CursorResult[tuple[()]]", self.session.execute(stmt))
        return result.rowcount

    def visible_for(
        self, *, user_edipi: str, org_id: int, now: datetime
    ) -> Sequence[VisibleOrphan]:
        stmt = visible_orphans_statement(user_edipi=user_edipi, org_id=org_id, now=now)
        return [VisibleOrphan(**row) for row in self.session.execute(stmt).mappings()]


class SqlAlchemyOrphanedRecordActionRepository:
    """Actions are keyed by ``(composite_id, user_edipi)``.

    Every delete statement also removes actions whose expiry has passed, whoever owns
    them, so no separate sweep is needed.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: OrphanedRecordAction) -> None:
        self.session.add(entity)

    def get(self, composite_id: str, user_edipi: str) -> OrphanedRecordAction | None:
        return self.session.get(OrphanedRecordAction, (composite_id, user_edipi))

    def delete_for_user(self, composite_id: str, user_edipi: str, *, now: datetime) -> int:
        action = orphaned_record_action_table
        return self._delete_or_expired(
            (action.c.composite_id == composite_id) & (action.c.user_edipi == user_edipi),
            now=now,
        )

    def delete_matching(
        self,
        composite_id: str,
        user_edipi: str,
        action_type: ActionType,
        *,
        now: datetime,
    ) -> int:
        action = orphaned_record_action_table
        return self._delete_or_expired(
            (action.c.composite_id == composite_id)
            & (action.c.user_edipi == user_edipi)
            & (action.c.type == action_type),
            now=now,
        )

    def delete_for_record(self, composite_id: str, *, now: datetime) -> int:
        return self._delete_or_expired(
            orphaned_record_action_table.c.composite_id == composite_id,
            now=now,
        )

    def _delete_or_expired(self, criteria: ColumnElement[bool], *, now: datetime) -> int:
        expires_on = orphaned_record_action_table.c.expires_on
        stmt = delete(orphaned_record_action_table).where(
            or_(criteria, expires_on < now)
        )
        result = cast("CursorResult[tuple[()]]", self.session.execute(stmt))
        return result.rowcount


class SqlAlchemyRosterHistoryRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: RosterHistory) -> None:
        self.session.add(entity)

    def get(self, row_id: int) -> RosterHistory | None:
        return self.session.get(RosterHistory, row_id)

    def since(self, *, unit_id: int, timestamp: datetime) -> Sequence[RosterHistory]:
        stmt = roster_history_since(unit_id=unit_id, timestamp=timestamp)
        return self.session.execute(stmt).scalars().all()

    def save(self, rows: Sequence[RosterHistory]) -> None:
        self.session.add_all(rows)
        self.session.flush()

    def remove(self, entity: RosterHistory) -> None:
        self.session.delete(entity)


class SqlAlchemyRosterRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Roster) -> None:
        self.session.add(entity)

    def get(self, roster_id: int) -> Roster | None:
        return self.session.get(Roster, roster_id)

    def find(self, *, edipi: str, unit_id: int) -> Roster | None:
        stmt = (
            select(Roster)
            .where(roster_table.c.edipi == edipi)
            .where(roster_table.c.unit_id == unit_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def remove(self, entity: Roster) -> None:
        self.session.delete(entity)


class SqlAlchemyUnitRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Unit) -> None:
        self.session.add(entity)

    def get(self, unit_id: int) -> Unit | None:
        return self.session.get(Unit, unit_id)


class SqlAlchemyOrgRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Org) -> None:
        self.session.add(entity)

    def get(self, org_id: int) -> Org | None:
        return self.session.get(Org, org_id)

    def get_by_reporting_group(self, reporting_group: str) -> Org | None:
        stmt = select(Org).where(org_table.c.reporting_group == reporting_group)
        return self.session.execute(stmt).scalar_one_or_none()


if TYPE_CHECKING:
    from rosterrecon.domain.ports.persistence import (
        OrgRepository,
        OrphanedRecordActionRepository,
        OrphanedRecordRepository,
        RosterHistoryRepository,
        RosterRepository,
        UnitRepository,
    )

    _session_stub = cast("Session", object())
    _orphan_repo: OrphanedRecordRepository = SqlAlchemyOrphanedRecordRepository(_session_stub)
    _action_repo: OrphanedRecordActionRepository = SqlAlchemyOrphanedRecordActionRepository(
        _session_stub
    )
    _history_repo: RosterHistoryRepository = SqlAlchemyRosterHistoryRepository(_session_stub)
    _roster_repo: RosterRepository = SqlAlchemyRosterRepository(_session_stub)
    _unit_repo: UnitRepository = SqlAlchemyUnitRepository(_session_stub)
    _org_repo: OrgRepository = SqlAlchemyOrgRepository(_session_stub)
