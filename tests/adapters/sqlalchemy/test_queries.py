from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import select

from rosterrecon.adapters.sqlalchemy.queries import (
    current_membership,
    latest_roster_history,
    roster_history_since,
)
from rosterrecon.domain.model import ChangeType, Org, RosterHistory, Unit

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def units(sqlite_session: Session) -> tuple[Unit, Unit, Unit]:
    org = Org(name="Org")
    other = Org(name="Other")
    sqlite_session.add_all([org, other])
    sqlite_session.flush()
    assert org.id is not None
    assert other.id is not None
    alpha = Unit(org_id=org.id, name="Alpha")
    bravo = Unit(org_id=org.id, name="Bravo")
    foreign = Unit(org_id=other.id, name="Foreign")
    sqlite_session.add_all([alpha, bravo, foreign])
    sqlite_session.flush()
    return alpha, bravo, foreign


def _event(
    session: Session, unit: Unit, change: ChangeType, seconds: int, *, edipi: str = "1"
) -> RosterHistory:
    assert unit.id is not None
    row = RosterHistory(
        edipi=edipi,
        unit_id=unit.id,
        change_type=change,
        timestamp=T0 + timedelta(seconds=seconds),
    )
    session.add(row)
    session.flush()
    return row


def test_latest_history_prefers_deletion_on_tie(
    sqlite_session: Session, units: tuple[Unit, Unit, Unit]
) -> None:
    alpha, _, _ = units
    _event(sqlite_session, alpha, ChangeType.ADDED, 0)
    deleted = _event(sqlite_session, alpha, ChangeType.DELETED, 10)
    _event(sqlite_session, alpha, ChangeType.ADDED, 10)
    assert alpha.org_id is not None

    latest = latest_roster_history(alpha.org_id)
    rows = sqlite_session.execute(select(latest.c.id, latest.c.change_type)).all()

    assert [(row.id, row.change_type) for row in rows] == [(deleted.id, ChangeType.DELETED)]


def test_latest_history_is_scoped_to_org(
    sqlite_session: Session, units: tuple[Unit, Unit, Unit]
) -> None:
    alpha, bravo, foreign = units
    in_alpha = _event(sqlite_session, alpha, ChangeType.ADDED, 0)
    in_bravo = _event(sqlite_session, bravo, ChangeType.CHANGED, 5)
    _event(sqlite_session, foreign, ChangeType.ADDED, 20)

    latest = latest_roster_history(alpha.org_id)
    ids = set(sqlite_session.execute(select(latest.c.id)).scalars())

    assert ids == {in_alpha.id, in_bravo.id}


def test_current_membership_picks_most_recent_live_unit(
    sqlite_session: Session, units: tuple[Unit, Unit, Unit]
) -> None:
    alpha, bravo, _ = units
    _event(sqlite_session, alpha, ChangeType.ADDED, 0)
    live_bravo = _event(sqlite_session, bravo, ChangeType.ADDED, 5)
    _event(sqlite_session, alpha, ChangeType.DELETED, 30)
    _event(sqlite_session, alpha, ChangeType.ADDED, 0, edipi="2")
    _event(sqlite_session, alpha, ChangeType.DELETED, 1, edipi="2")

    membership = current_membership(latest_roster_history(alpha.org_id))
    rows = sqlite_session.execute(
        select(membership.c.edipi, membership.c.unit_id, membership.c.id)
    ).all()

    assert [tuple(row) for row in rows] == [("1", bravo.id, live_bravo.id)]


def test_history_since_orders_for_backdating(
    sqlite_session: Session, units: tuple[Unit, Unit, Unit]
) -> None:
    alpha, bravo, _ = units
    _event(sqlite_session, alpha, ChangeType.ADDED, -5, edipi="9")
    low = _event(sqlite_session, alpha, ChangeType.ADDED, 20, edipi="1")
    high_old = _event(sqlite_session, alpha, ChangeType.ADDED, 0, edipi="3")
    high_new = _event(sqlite_session, alpha, ChangeType.DELETED, 15, edipi="3")
    _event(sqlite_session, bravo, ChangeType.ADDED, 50, edipi="5")
    assert alpha.id is not None

    stmt = roster_history_since(unit_id=alpha.id, timestamp=T0)
    rows = sqlite_session.execute(stmt).scalars().all()

    assert [row.id for row in rows] == [high_new.id, high_old.id, low.id]
