"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from rosterrecon.adapters.reingest import HttpDocumentReingester
from rosterrecon.adapters.sqlalchemy.roster_entries import SqlAlchemyRosterEntryGateway
from rosterrecon.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyOrphanUnitOfWork,
    is_started,
    startup,
)
from rosterrecon.domain.actions import clear_action, set_action
from rosterrecon.domain.intake import delete_orphaned_record, record_orphan
from rosterrecon.domain.ports.unit_of_work import OrphanUnitOfWork
from rosterrecon.domain.resolution import resolve_orphaned_record
from rosterrecon.domain.visibility import list_visible_orphans

if TYPE_CHECKING:
    from rosterrecon.domain.model import (
        ActionType,
        OrphanedRecord,
        OrphanedRecordAction,
        OrphanReport,
        ResolutionResult,
        RosterEntryData,
        VisibleOrphan,
    )
    from rosterrecon.domain.ports.collaborators import DocumentReingester, RosterEntryGateway

UnitOfWorkFactory = Callable[[], OrphanUnitOfWork]


log = getLogger(__name__)


def _unit_of_work_factory(factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if factory is not None:
        return factory
    if not is_started():
        startup()
    return SqlAlchemyOrphanUnitOfWork


def list_orphans(
    *,
    user_edipi: str,
    org_id: int,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[VisibleOrphan]:
    """List orphaned records the user can act on."""

    return list_visible_orphans(
        user_edipi=user_edipi,
        org_id=org_id,
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
    )


def set_orphan_action(
    composite_id: str,
    *,
    user_edipi: str,
    action_type: ActionType | str,
    ttl_ms: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> OrphanedRecordAction:
    return set_action(
        composite_id,
        user_edipi=user_edipi,
        action_type=action_type,
        ttl_ms=ttl_ms,
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
    )


def clear_orphan_action(
    composite_id: str,
    *,
    user_edipi: str,
    action_type: ActionType | str,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> None:
    clear_action(
        composite_id,
        user_edipi=user_edipi,
        action_type=action_type,
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
    )


def resolve_orphan(
    composite_id: str,
    *,
    org_id: int,
    entry: RosterEntryData,
    role: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    roster_gateway: RosterEntryGateway | None = None,
    reingester: DocumentReingester | None = None,
) -> ResolutionResult:
    """Resolve an orphaned record using the configured adapters."""

    effective_uow = _unit_of_work_factory(unit_of_work_factory)
    effective_gateway = roster_gateway or SqlAlchemyRosterEntryGateway(effective_uow)
    effective_reingester = reingester or HttpDocumentReingester()
    log.info("Resolving orphaned record %s in org %s", composite_id, org_id)

    return resolve_orphaned_record(
        composite_id,
        org_id=org_id,
        entry=entry,
        role=role,
        unit_of_work_factory=effective_uow,
        roster_gateway=effective_gateway,
        reingester=effective_reingester,
    )


def delete_orphan(
    composite_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> int:
    return delete_orphaned_record(
        composite_id,
        unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory),
    )


def ingest_orphan(
    report: OrphanReport,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> tuple[OrphanedRecord, bool]:
    return record_orphan(report, unit_of_work_factory=_unit_of_work_factory(unit_of_work_factory))
