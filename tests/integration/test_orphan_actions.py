from __future__ import annotations

import pytest

from rosterrecon.domain.actions import clear_action, parse_action_type, set_action
from rosterrecon.domain.errors import InvalidArgumentError, NotFoundError
from rosterrecon.domain.model import ActionType, OrphanedRecordAction
from tests.helpers.orphans import RosterFixture, add_orphan, at, fixed_clock

ALICE = "1111111111"
BOB = "2222222222"


def _set(
    roster: RosterFixture,
    composite_id: str,
    user: str,
    action_type: ActionType | str | None,
    *,
    ttl_ms: int | None = 60_000,
    now_seconds: float = 0,
) -> OrphanedRecordAction:
    return set_action(
        composite_id,
        user_edipi=user,
        action_type=action_type,
        ttl_ms=ttl_ms,
        unit_of_work_factory=roster.uow,
        clock=fixed_clock(at(now_seconds)),
    )


def _clear(
    roster: RosterFixture,
    composite_id: str,
    user: str,
    action_type: ActionType | str | None,
    *,
    now_seconds: float = 0,
) -> None:
    clear_action(
        composite_id,
        user_edipi=user,
        action_type=action_type,
        unit_of_work_factory=roster.uow,
        clock=fixed_clock(at(now_seconds)),
    )


def _stored(roster: RosterFixture, composite_id: str, user: str) -> OrphanedRecordAction | None:
    with roster.uow() as uow:
        return uow.repositories.actions.get(composite_id, user)


def test_parse_action_type_accepts_wire_values() -> None:
    assert parse_action_type("claim") is ActionType.CLAIM
    assert parse_action_type("ignore") is ActionType.IGNORE
    assert parse_action_type(ActionType.IGNORE) is ActionType.IGNORE


@pytest.mark.parametrize("value", [None, "", "approve"])
def test_parse_action_type_rejects_unknown_values(value: str | None) -> None:
    with pytest.raises(InvalidArgumentError):
        parse_action_type(value)


def test_set_action_stores_claim_with_expiry(roster: RosterFixture) -> None:
    record = add_orphan(roster)

    action = _set(roster, record.composite_id, ALICE, "claim", ttl_ms=30_000)

    assert action.type is ActionType.CLAIM
    assert action.expires_on == at(30)
    stored = _stored(roster, record.composite_id, ALICE)
    assert stored is not None
    assert stored.type is ActionType.CLAIM
    assert stored.expires_on == at(30)


def test_set_action_requires_existing_record(roster: RosterFixture) -> None:
    with pytest.raises(NotFoundError):
        _set(roster, "9999999999_1", ALICE, ActionType.CLAIM)


def test_set_action_rejects_soft_deleted_record(roster: RosterFixture) -> None:
    record = add_orphan(roster, deleted_on=at(-1))

    with pytest.raises(NotFoundError):
        _set(roster, record.composite_id, ALICE, ActionType.CLAIM)


def test_set_action_rejects_unknown_type(roster: RosterFixture) -> None:
    record = add_orphan(roster)

    with pytest.raises(InvalidArgumentError):
        _set(roster, record.composite_id, ALICE, "approve")

    assert _stored(roster, record.composite_id, ALICE) is None


@pytest.mark.parametrize(("composite_id", "user"), [("", ALICE), ("1234567890_1", "")])
def test_set_action_requires_id_and_user(
    roster: RosterFixture, composite_id: str, user: str
) -> None:
    with pytest.raises(InvalidArgumentError):
        _set(roster, composite_id, user, ActionType.CLAIM)


def test_set_action_rejects_negative_ttl(roster: RosterFixture) -> None:
    record = add_orphan(roster)

    with pytest.raises(InvalidArgumentError):
        _set(roster, record.composite_id, ALICE, ActionType.CLAIM, ttl_ms=-5)


def test_new_action_replaces_previous_one_for_same_user(roster: RosterFixture) -> None:
    record = add_orphan(roster)

    _set(roster, record.composite_id, ALICE, ActionType.CLAIM)
    _set(roster, record.composite_id, ALICE, ActionType.IGNORE, ttl_ms=None, now_seconds=1)

    stored = _stored(roster, record.composite_id, ALICE)
    assert stored is not None
    assert stored.type is ActionType.IGNORE
    assert stored.expires_on is None


def test_setting_action_purges_expired_actions_of_other_users(roster: RosterFixture) -> None:
    record = add_orphan(roster)
    other = add_orphan(roster, edipi="1000000009")

    _set(roster, record.composite_id, BOB, ActionType.CLAIM, ttl_ms=1_000)
    _set(roster, other.composite_id, BOB, ActionType.IGNORE, ttl_ms=None)
    _set(roster, record.composite_id, ALICE, ActionType.CLAIM, now_seconds=10)

    assert _stored(roster, record.composite_id, BOB) is None
    assert _stored(roster, other.composite_id, BOB) is not None
    assert _stored(roster, record.composite_id, ALICE) is not None


def test_clear_action_removes_matching_action(roster: RosterFixture) -> None:
    record = add_orphan(roster)
    _set(roster, record.composite_id, ALICE, ActionType.CLAIM)

    _clear(roster, record.composite_id, ALICE, "claim", now_seconds=1)

    assert _stored(roster, record.composite_id, ALICE) is None


def test_clear_action_keeps_action_of_other_type(roster: RosterFixture) -> None:
    record = add_orphan(roster)
    _set(roster, record.composite_id, ALICE, ActionType.CLAIM)

    _clear(roster, record.composite_id, ALICE, ActionType.IGNORE, now_seconds=1)

    stored = _stored(roster, record.composite_id, ALICE)
    assert stored is not None
    assert stored.type is ActionType.CLAIM


def test_clear_action_keeps_other_users_actions(roster: RosterFixture) -> None:
    record = add_orphan(roster)
    _set(roster, record.composite_id, BOB, ActionType.CLAIM)

    _clear(roster, record.composite_id, ALICE, ActionType.CLAIM, now_seconds=1)

    assert _stored(roster, record.composite_id, BOB) is not None


def test_clear_action_is_idempotent(roster: RosterFixture) -> None:
    record = add_orphan(roster)

    _clear(roster, record.composite_id, ALICE, ActionType.CLAIM)
    _clear(roster, record.composite_id, ALICE, ActionType.CLAIM)

    assert _stored(roster, record.composite_id, ALICE) is None


def test_clear_action_requires_type(roster: RosterFixture) -> None:
    with pytest.raises(InvalidArgumentError):
        _clear(roster, "1234567890_1", ALICE, None)
