"""Resolve an orphaned record into the roster history.

The workflow runs in three phases:

1. Look up the single active record for the composite id and the roster history
   of the hinted unit (read only).
2. When the hint yields no history, ask the roster gateway to create an entry. This
   is the one step outside the store transaction and it is compensated by deleting
   the entry if anything later fails.
3. In one unit of work: lock the record, backdate the history rows to the earliest
   active report, soft-delete the record and drop its actions (plus expired ones).

After commit the source document is reingested. That call is best effort: its
failure is reported as :class:`UpstreamError` but the resolution stands.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from rosterrecon.domain.errors import (
    ConflictError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    UpstreamError,
)
from rosterrecon.domain.model import ResolutionItem, ResolutionResult
from rosterrecon.domain.timekeeping import BACKDATE_STEP, ensure_utc, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime, timedelta

    from rosterrecon.domain.model import (
        OrphanedRecord,
        ReingestResult,
        Roster,
        RosterEntryData,
        RosterHistory,
    )
    from rosterrecon.domain.ports.collaborators import DocumentReingester, RosterEntryGateway
    from rosterrecon.domain.ports.persistence import OrphanedRecordRepository
    from rosterrecon.domain.ports.unit_of_work import OrphanUnitOfWork
    from rosterrecon.domain.timekeeping import Clock

log = getLogger(__name__)


def backdate_history(
    rows: Sequence[RosterHistory],
    earliest: datetime,
    *,
    step: timedelta = BACKDATE_STEP,
) -> None:
    """Move each row to no later than ``earliest``, spacing successive rows by ``step``.

    Rows keep their relative order, never move forward in time, and end up with
    strictly decreasing timestamps when they all started at or after ``earliest``.
    """

    running = ensure_utc(earliest)
    for row in rows:
        row.timestamp = min(ensure_utc(row.timestamp), running)
        running -= step


def single_active_record(
    repository: OrphanedRecordRepository,
    composite_id: str,
    *,
    for_update: bool = False,
) -> OrphanedRecord:
    records = repository.list_active(composite_id, for_update=for_update)
    if not records:
        raise NotFoundError(f"Unable to locate orphaned record with id: {composite_id}")
    if len(records) > 1:
        raise ConflictError(f"Encountered Multiple Orphaned Records: {composite_id}")
    return records[0]


def resolve_orphaned_record(
    composite_id: str,
    *,
    org_id: int,
    entry: RosterEntryData,
    unit_of_work_factory: Callable[[], OrphanUnitOfWork],
    roster_gateway: RosterEntryGateway,
    reingester: DocumentReingester,
    role: str | None = None,
    clock: Clock = utcnow,
) -> ResolutionResult:
    """Resolve ``composite_id`` into roster history and reingest its source document."""

    if not composite_id:
        raise InvalidArgumentError("Param 'id' is required.")

    with unit_of_work_factory() as uow:
        record = single_active_record(uow.repositories.orphaned_records, composite_id)
        report_time = record.timestamp
        history: Sequence[RosterHistory] = ()
        if entry.unit_id is not None:
            history = uow.repositories.roster_history.since(
                unit_id=entry.unit_id, timestamp=report_time
            )

    unit_id = entry.unit_id
    new_entry: Roster | None = None
    if not history:
        new_entry = roster_gateway.create_roster_entry(org_id=org_id, role=role, entry=entry)
        unit_id = new_entry.unit_id
        log.info("Created roster entry %s in unit %s for %s", new_entry.id, unit_id, composite_id)

    try:
        record = _commit_resolution(
            composite_id,
            unit_id=unit_id,
            unit_of_work_factory=unit_of_work_factory,
            now=ensure_utc(clock()),
        )
    except Exception as exc:
        if new_entry is not None:
            _compensate(roster_gateway, new_entry, exc)
        raise

    reingested = _reingest(reingester, record)
    return ResolutionResult(
        records_ingested=reingested.records_ingested,
        lambda_invocation_count=reingested.lambda_invocation_count,
        items=(
            ResolutionItem(
                records_ingested=reingested.records_ingested,
                lambda_invocation_count=reingested.lambda_invocation_count,
                orphaned_record=record,
            ),
        ),
    )


def _commit_resolution(
    composite_id: str,
    *,
    unit_id: int | None,
    unit_of_work_factory: Callable[[], OrphanUnitOfWork],
    now: datetime,
) -> OrphanedRecord:
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        record = single_active_record(
            repositories.orphaned_records, composite_id, for_update=True
        )

        history = (
            repositories.roster_history.since(unit_id=unit_id, timestamp=record.timestamp)
            if unit_id is not None
            else ()
        )
        if not history:
            raise InternalError("Unable to locate RosterHistory record.")

        earliest = repositories.orphaned_records.earliest_timestamp(composite_id)
        backdate_history(history, earliest or record.timestamp)
        repositories.roster_history.save(history)

        if not repositories.orphaned_records.soft_delete(record, at=now):
            raise NotFoundError(f"Orphaned record {composite_id} was resolved concurrently")

        cleared = repositories.actions.delete_for_record(composite_id, now=now)
        uow.commit()

    log.info(
        "Resolved %s: backdated %d roster history rows in unit %s, cleared %d actions",
        composite_id,
        len(history),
        unit_id,
        cleared,
    )
    return record


def _compensate(gateway: RosterEntryGateway, entry: Roster, cause: Exception) -> None:
    try:
        gateway.delete_roster_entry(entry)
    except Exception as secondary:
        log.exception("Failed to delete roster entry %s after a failed resolution", entry.id)
        cause.add_note(f"Compensating deletion of roster entry {entry.id} failed: {secondary!r}")
    else:
        log.info("Deleted roster entry %s after a failed resolution", entry.id)


def _reingest(reingester: DocumentReingester, record: OrphanedRecord) -> ReingestResult:
    try:
        result = reingester.reingest_document(record.document_id)
    except Exception as exc:
        log.warning(
            "Resolution of %s committed but reingestion of document %s failed: %s",
            record.composite_id,
            record.document_id,
            exc,
        )
        if isinstance(exc, UpstreamError):
            exc.orphaned_record = record
            raise
        raise UpstreamError(
            f"Reingestion of document {record.document_id} failed: {exc}",
            orphaned_record=record,
        ) from exc

    log.info(
        "Reingested document %s: records=%d, invocations=%d",
        record.document_id,
        result.records_ingested,
        result.lambda_invocation_count,
    )
    return result
