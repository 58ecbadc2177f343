"""Recording new orphaned records and discarding existing ones."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from rosterrecon.domain.errors import InvalidArgumentError, NotFoundError
from rosterrecon.domain.model import OrphanedRecord, compose_id
from rosterrecon.domain.timekeeping import convert_date_param, ensure_utc, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable

    from rosterrecon.domain.model import OrphanReport
    from rosterrecon.domain.ports.unit_of_work import OrphanUnitOfWork
    from rosterrecon.domain.timekeeping import Clock

log = getLogger(__name__)


def record_orphan(
    report: OrphanReport,
    *,
    unit_of_work_factory: Callable[[], OrphanUnitOfWork],
) -> tuple[OrphanedRecord, bool]:
    """Store an unmatched report, returning the record and whether it was created.

    Reports are idempotent per source document: a repeated ``document_id`` returns the
    record stored the first time.
    """

    if not report.reporting_group:
        raise InvalidArgumentError("Missing reportingGroup from body.")
    if not report.document_id:
        raise InvalidArgumentError("Missing documentId from body.")
    if not report.edipi:
        raise InvalidArgumentError("Missing edipi from body.")
    timestamp = convert_date_param(report.timestamp)

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        existing = repositories.orphaned_records.find_by_document_id(report.document_id)
        if existing is not None:
            log.debug("Document %s already recorded as orphan", report.document_id)
            return existing, False

        org = repositories.orgs.get_by_reporting_group(report.reporting_group)
        if org is None or org.id is None:
            raise NotFoundError(
                f"Unable to locate org for reporting group: {report.reporting_group}"
            )

        record = OrphanedRecord(
            document_id=report.document_id,
            edipi=report.edipi,
            phone=report.phone,
            unit=report.unit,
            timestamp=timestamp,
            org_id=org.id,
            composite_id=compose_id(report.edipi, org.id),
        )
        repositories.orphaned_records.add(record)
        uow.commit()

    log.info("Recorded orphan %s from document %s", record.composite_id, record.document_id)
    return record, True


def delete_orphaned_record(
    composite_id: str,
    *,
    unit_of_work_factory: Callable[[], OrphanUnitOfWork],
    clock: Clock = utcnow,
) -> int:
    """Soft-delete every active row of ``composite_id`` and return how many changed."""

    if not composite_id:
        raise InvalidArgumentError("Param 'id' is required.")

    with unit_of_work_factory() as uow:
        removed = uow.repositories.orphaned_records.soft_delete_group(
            composite_id, at=ensure_utc(clock())
        )
        if removed == 0:
            raise NotFoundError(f"Unable to locate orphaned record with id: {composite_id}")
        uow.commit()

    log.info("Removed %d orphaned record rows for %s", removed, composite_id)
    return removed
