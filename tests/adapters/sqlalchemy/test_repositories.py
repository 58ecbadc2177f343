from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from rosterrecon.adapters.sqlalchemy.repositories import (
    SqlAlchemyOrgRepository,
    SqlAlchemyOrphanedRecordActionRepository,
    SqlAlchemyOrphanedRecordRepository,
    SqlAlchemyRosterHistoryRepository,
    SqlAlchemyRosterRepository,
)
from rosterrecon.domain.model import (
    ActionType,
    ChangeType,
    Org,
    OrphanedRecord,
    OrphanedRecordAction,
    Roster,
    RosterHistory,
    Unit,
    compose_id,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def unit(sqlite_session: Session) -> Unit:
    org = Org(name="Org", reporting_group="group")
    sqlite_session.add(org)
    sqlite_session.flush()
    assert org.id is not None
    unit = Unit(org_id=org.id, name="Alpha")
    sqlite_session.add(unit)
    sqlite_session.flush()
    return unit


def _record(unit: Unit, *, offset: int, deleted: bool = False, doc: str = "") -> OrphanedRecord:
    return OrphanedRecord(
        document_id=doc or f"doc-{offset}",
        edipi="1234567890",
        phone=None,
        unit=None,
        timestamp=T0 + timedelta(seconds=offset),
        org_id=unit.org_id,
        composite_id=compose_id("1234567890", unit.org_id),
        deleted_on=T0 if deleted else None,
    )


def test_list_active_skips_soft_deleted_rows(sqlite_session: Session, unit: Unit) -> None:
    repo = SqlAlchemyOrphanedRecordRepository(sqlite_session)
    active = _record(unit, offset=10)
    repo.add(_record(unit, offset=0, deleted=True))
    repo.add(active)
    sqlite_session.flush()

    assert list(repo.list_active(active.composite_id)) == [active]
    assert list(repo.list_active(active.composite_id, for_update=True)) == [active]


def test_earliest_timestamp_ignores_soft_deleted_rows(
    sqlite_session: Session, unit: Unit
) -> None:
    repo = SqlAlchemyOrphanedRecordRepository(sqlite_session)
    repo.add(_record(unit, offset=0, deleted=True))
    repo.add(_record(unit, offset=10))
    sqlite_session.flush()

    composite_id = compose_id("1234567890", unit.org_id)
    assert repo.earliest_timestamp(composite_id) == T0 + timedelta(seconds=10)
    assert repo.earliest_timestamp("missing") is None


def test_earliest_timestamp_is_none_once_every_row_is_deleted(
    sqlite_session: Session, unit: Unit
) -> None:
    repo = SqlAlchemyOrphanedRecordRepository(sqlite_session)
    repo.add(_record(unit, offset=0, deleted=True))
    sqlite_session.flush()

    assert repo.earliest_timestamp(compose_id("1234567890", unit.org_id)) is None


def test_soft_delete_only_succeeds_once(sqlite_session: Session, unit: Unit) -> None:
    repo = SqlAlchemyOrphanedRecordRepository(sqlite_session)
    record = _record(unit, offset=0)
    repo.add(record)
    sqlite_session.flush()

    assert repo.soft_delete(record, at=T0 + timedelta(hours=1)) is True
    assert record.deleted_on == T0 + timedelta(hours=1)
    assert repo.soft_delete(record, at=T0 + timedelta(hours=2)) is False
    assert record.deleted_on == T0 + timedelta(hours=1)
    assert list(repo.list_active(record.composite_id)) == []


def test_find_by_document_id(sqlite_session: Session, unit: Unit) -> None:
    repo = SqlAlchemyOrphanedRecordRepository(sqlite_session)
    record = _record(unit, offset=0, doc="doc-abc")
    repo.add(record)
    sqlite_session.flush()

    assert repo.find_by_document_id("doc-abc") is record
    assert repo.find_by_document_id("doc-missing") is None


def test_action_deletes_also_purge_expired_actions(sqlite_session: Session) -> None:
    repo = SqlAlchemyOrphanedRecordActionRepository(sqlite_session)
    repo.add(OrphanedRecordAction(composite_id="a_1", user_edipi="u1", type=ActionType.CLAIM))
    repo.add(
        OrphanedRecordAction(
            composite_id="b_1",
            user_edipi="u2",
            type=ActionType.IGNORE,
            expires_on=T0 - timedelta(seconds=1),
        )
    )
    repo.add(
        OrphanedRecordAction(
            composite_id="c_1",
            user_edipi="u3",
            type=ActionType.CLAIM,
            expires_on=T0 + timedelta(hours=1),
        )
    )
    sqlite_session.flush()

    removed = repo.delete_for_user("a_1", "u1", now=T0)
    sqlite_session.expunge_all()

    assert removed == 2
    assert repo.get("a_1", "u1") is None
    assert repo.get("b_1", "u2") is None
    assert repo.get("c_1", "u3") is not None


def test_delete_matching_respects_action_type(sqlite_session: Session) -> None:
    repo = SqlAlchemyOrphanedRecordActionRepository(sqlite_session)
    repo.add(OrphanedRecordAction(composite_id="a_1", user_edipi="u1", type=ActionType.CLAIM))
    sqlite_session.flush()

    assert repo.delete_matching("a_1", "u1", ActionType.IGNORE, now=T0) == 0
    assert repo.delete_matching("a_1", "u1", ActionType.CLAIM, now=T0) == 1


def test_roster_history_save_flushes_changes(sqlite_session: Session, unit: Unit) -> None:
    assert unit.id is not None
    repo = SqlAlchemyRosterHistoryRepository(sqlite_session)
    row = RosterHistory(edipi="1", unit_id=unit.id, change_type=ChangeType.ADDED, timestamp=T0)

    repo.save([row])

    assert row.id is not None
    assert repo.get(row.id) is row


def test_roster_find_and_remove(sqlite_session: Session, unit: Unit) -> None:
    assert unit.id is not None
    repo = SqlAlchemyRosterRepository(sqlite_session)
    entry = Roster(edipi="1234567890", unit_id=unit.id, first_name="Pat")
    repo.add(entry)
    sqlite_session.flush()

    assert repo.find(edipi="1234567890", unit_id=unit.id) is entry
    repo.remove(entry)
    sqlite_session.flush()
    assert repo.find(edipi="1234567890", unit_id=unit.id) is None


def test_roster_history_remove_deletes_row(sqlite_session: Session, unit: Unit) -> None:
    assert unit.id is not None
    repo = SqlAlchemyRosterHistoryRepository(sqlite_session)
    row = RosterHistory(edipi="1", unit_id=unit.id, change_type=ChangeType.ADDED, timestamp=T0)
    repo.save([row])
    assert row.id is not None

    repo.remove(row)
    sqlite_session.flush()

    assert repo.get(row.id) is None
    assert list(repo.since(unit_id=unit.id, timestamp=T0)) == []


def test_org_lookup_by_reporting_group(sqlite_session: Session, unit: Unit) -> None:
    repo = SqlAlchemyOrgRepository(sqlite_session)

    org = repo.get_by_reporting_group("group")

    assert org is not None
    assert org.id == unit.org_id
    assert repo.get_by_reporting_group("other") is None
