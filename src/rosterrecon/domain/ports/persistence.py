"""Ports for persisting orphan records, actions and roster state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from rosterrecon.domain.model import (
    Org,
    OrphanedRecord,
    OrphanedRecordAction,
    Roster,
    RosterHistory,
    Unit,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from rosterrecon.domain.model import ActionType, VisibleOrphan


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class OrphanedRecordRepository(Repository[OrphanedRecord], Protocol):
    """Persistence contract for orphaned records."""

    def find_by_document_id(self, document_id: str) -> OrphanedRecord | None: ...

    def list_active(
        self, composite_id: str, *, for_update: bool = False
    ) -> Sequence[OrphanedRecord]: ...

    def earliest_timestamp(self, composite_id: str) -> datetime | None:
        """Return the earliest report time among the active rows of ``composite_id``."""
        ...

    def soft_delete(self, record: OrphanedRecord, *, at: datetime) -> bool:
        """Mark ``record`` deleted unless already deleted; return whether it changed."""
        ...

    def soft_delete_group(self, composite_id: str, *, at: datetime) -> int: ...

    def visible_for(
        self, *, user_edipi: str, org_id: int, now: datetime
    ) -> Sequence[VisibleOrphan]: ...


@runtime_checkable
class OrphanedRecordActionRepository(Repository[OrphanedRecordAction], Protocol):
    """Persistence contract for claim/ignore actions.

    Every delete also purges actions of any owner whose expiry is before ``now``.
    """

    def get(self, composite_id: str, user_edipi: str) -> OrphanedRecordAction | None: ...

    def delete_for_user(self, composite_id: str, user_edipi: str, *, now: datetime) -> int: ...

    def delete_matching(
        self,
        composite_id: str,
        user_edipi: str,
        action_type: ActionType,
        *,
        now: datetime,
    ) -> int: ...

    def delete_for_record(self, composite_id: str, *, now: datetime) -> int: ...


@runtime_checkable
class RosterHistoryRepository(Repository[RosterHistory], Protocol):
    """Persistence contract for the roster change log."""

    def get(self, row_id: int) -> RosterHistory | None: ...

    def since(self, *, unit_id: int, timestamp: datetime) -> Sequence[RosterHistory]:
        """Return rows of ``unit_id`` at or after ``timestamp``, most recent first."""
        ...

    def save(self, rows: Sequence[RosterHistory]) -> None: ...

    def remove(self, entity: RosterHistory) -> None: ...


@runtime_checkable
class RosterRepository(Repository[Roster], Protocol):
    """Persistence contract for current roster entries."""

    def get(self, roster_id: int) -> Roster | None: ...

    def find(self, *, edipi: str, unit_id: int) -> Roster | None: ...

    def remove(self, entity: Roster) -> None: ...


@runtime_checkable
class UnitRepository(Repository[Unit], Protocol):
    def get(self, unit_id: int) -> Unit | None: ...


@runtime_checkable
class OrgRepository(Repository[Org], Protocol):
    def get(self, org_id: int) -> Org | None: ...

    def get_by_reporting_group(self, reporting_group: str) -> Org | None: ...
