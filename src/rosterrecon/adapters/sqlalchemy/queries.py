"""Statement builders for roster state and orphan visibility.

All recency decisions on ``roster_history`` use the same ordering: most recent
timestamp first and, for equal timestamps, change type descending so that a
deletion outranks an addition.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import and_, exists, func, or_, select

from rosterrecon.adapters.sqlalchemy.mappings import (
    orphaned_record_action_table,
    orphaned_record_table,
    roster_history_table,
    unit_table,
)
from rosterrecon.domain.model import ActionType, ChangeType, RosterHistory

if TYPE_CHECKING:
    from datetime import datetime

    from sqlalchemy import CTE, ColumnElement, FromClause, ScalarSelect, Select, Subquery


def _recency_order(table: FromClause) -> tuple[ColumnElement[object], ...]:
    return (table.c.timestamp.desc(), table.c.change_type.desc())


def latest_roster_history(org_id: int) -> CTE:
    """Return the most recent history row per ``(unit_id, edipi)`` within ``org_id``."""

    rh = roster_history_table
    ranked = (
        select(
            rh.c.id,
            rh.c.edipi,
            rh.c.unit_id,
            rh.c.change_type,
            rh.c.timestamp,
            func.row_number()
            .over(partition_by=(rh.c.unit_id, rh.c.edipi), order_by=_recency_order(rh))
            .label("recency"),
        )
        .join(unit_table, unit_table.c.id == rh.c.unit_id)
        .where(unit_table.c.org_id == org_id)
        .subquery("ranked_history")
    )
    return (
        select(
            ranked.c.id,
            ranked.c.edipi,
            ranked.c.unit_id,
            ranked.c.change_type,
            ranked.c.timestamp,
        )
        .where(ranked.c.recency == 1)
        .cte("latest_history")
    )


def current_membership(latest: CTE) -> Subquery:
    """Pick one live membership per edipi from ``latest``.

    Units where the latest event is a deletion are skipped. When several units remain,
    the one with the most recent event wins.
    """

    ranked = (
        select(
            latest.c.id,
            latest.c.edipi,
            latest.c.unit_id,
            func.row_number()
            .over(
                partition_by=latest.c.edipi,
                order_by=(latest.c.timestamp.desc(), latest.c.id.desc()),
            )
            .label("preference"),
        )
        .where(latest.c.change_type != ChangeType.DELETED)
        .subquery("live_history")
    )
    return (
        select(ranked.c.id, ranked.c.edipi, ranked.c.unit_id)
        .where(ranked.c.preference == 1)
        .subquery("current_membership")
    )


def _from_latest_report(orphan: FromClause, column: str) -> ScalarSelect[object]:
    """Correlate ``column`` of the most recent active report sharing the composite id."""

    report = orphaned_record_table.alias("newest_report")
    return (
        select(report.c[column])
        .where(
            report.c.composite_id == orphan.c.composite_id,
            report.c.deleted_on.is_(None),
        )
        .order_by(report.c.timestamp.desc(), report.c.id.desc())
        .limit(1)
        .scalar_subquery()
    )


def visible_orphans_statement(*, user_edipi: str, org_id: int, now: datetime) -> Select[tuple]:
    """Build the grouped query behind :func:`list_visible_orphans`."""

    orphan = orphaned_record_table
    action = orphaned_record_action_table
    own_claim = orphaned_record_action_table.alias("own_claim")
    latest = latest_roster_history(org_id)
    membership = current_membership(latest)

    blocking_action = exists().where(
        action.c.composite_id == orphan.c.composite_id,
        or_(action.c.expires_on.is_(None), action.c.expires_on > now),
        or_(
            and_(action.c.type == ActionType.CLAIM, action.c.user_edipi != user_edipi),
            and_(action.c.type == ActionType.IGNORE, action.c.user_edipi == user_edipi),
        ),
    )
    has_roster_history = exists().where(latest.c.edipi == orphan.c.edipi)

    latest_report = func.max(orphan.c.timestamp)
    return (
        select(
            orphan.c.composite_id.label("id"),
            orphan.c.edipi,
            _from_latest_report(orphan, "phone").label("phone"),
            _from_latest_report(orphan, "unit").label("unit"),
            func.count().label("count"),
            own_claim.c.type.label("action"),
            own_claim.c.expires_on.label("claimed_until"),
            latest_report.label("latest_report_date"),
            func.min(orphan.c.timestamp).label("earliest_report_date"),
            membership.c.unit_id,
            membership.c.id.label("roster_history_id"),
        )
        .select_from(
            orphan.outerjoin(
                own_claim,
                and_(
                    own_claim.c.composite_id == orphan.c.composite_id,
                    own_claim.c.user_edipi == user_edipi,
                    own_claim.c.type == ActionType.CLAIM,
                    or_(own_claim.c.expires_on.is_(None), own_claim.c.expires_on > now),
                ),
            ).outerjoin(membership, membership.c.edipi == orphan.c.edipi)
        )
        .where(
            orphan.c.org_id == org_id,
            orphan.c.deleted_on.is_(None),
            ~blocking_action,
            or_(membership.c.id.is_not(None), ~has_roster_history),
        )
        .group_by(
            orphan.c.composite_id,
            orphan.c.edipi,
            own_claim.c.type,
            own_claim.c.expires_on,
            membership.c.unit_id,
            membership.c.id,
        )
        .order_by(latest_report.desc(), orphan.c.composite_id)
    )


def roster_history_since(
    *, unit_id: int, timestamp: datetime
) -> Select[tuple[RosterHistory]]:
    """Select ``unit_id`` history rows at or after ``timestamp`` in backdating order."""

    rh = roster_history_table
    return (
        select(RosterHistory)
        .where(rh.c.unit_id == unit_id, rh.c.timestamp >= timestamp)
        .order_by(rh.c.edipi.desc(), *_recency_order(rh))
    )
