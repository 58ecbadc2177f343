"""Orphaned ingestion records and the per-user actions layered on them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from rosterrecon.domain.model.enums import ActionType


def compose_id(edipi: str, org_id: int) -> str:
    """Return the composite id shared by every report of ``edipi`` within an org."""

    return f"{edipi}_{org_id}"


@dataclass(eq=False, kw_only=True)
class OrphanedRecord:
    """A single ingestion occurrence that did not match a roster entry."""

    document_id: str
    edipi: str
    phone: str | None
    unit: str | None
    timestamp: datetime
    org_id: int
    composite_id: str
    deleted_on: datetime | None = None
    id: int | None = None


@dataclass(eq=False, kw_only=True)
class OrphanedRecordAction:
    """A claim or ignore lock held by one user on a composite id."""

    composite_id: str
    user_edipi: str
    type: ActionType
    expires_on: datetime | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class OrphanReport:
    """Raw payload for recording a new orphaned record."""

    document_id: str
    timestamp: int | float | str
    edipi: str
    phone: str | None = None
    unit: str | None = None
    reporting_group: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class VisibleOrphan:
    """Aggregate over every visible row sharing a composite id."""

    id: str
    edipi: str
    phone: str | None
    unit: str | None
    count: int
    latest_report_date: datetime
    earliest_report_date: datetime
    action: ActionType | None = None
    claimed_until: datetime | None = None
    unit_id: int | None = None
    roster_history_id: int | None = None
