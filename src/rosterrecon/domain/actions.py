"""Claim and ignore locks on orphaned records."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from rosterrecon.domain.errors import InvalidArgumentError, NotFoundError
from rosterrecon.domain.model import ActionType, OrphanedRecordAction
from rosterrecon.domain.timekeeping import compute_expiry, ensure_utc, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable

    from rosterrecon.domain.ports.unit_of_work import OrphanUnitOfWork
    from rosterrecon.domain.timekeeping import Clock

log = getLogger(__name__)


def parse_action_type(value: ActionType | str | None) -> ActionType:
    if not value:
        raise InvalidArgumentError("Expected 'action' in payload.")
    try:
        return ActionType(value)
    except ValueError as exc:
        raise InvalidArgumentError(f"Unsupported action type: {value}") from exc


def _require(value: str | None, name: str) -> str:
    if not value or not value.strip():
        raise InvalidArgumentError(f"Param '{name}' is required.")
    return value


def set_action(
    composite_id: str,
    *,
    user_edipi: str,
    action_type: ActionType | str | None,
    ttl_ms: int | None = None,
    unit_of_work_factory: Callable[[], OrphanUnitOfWork],
    clock: Clock = utcnow,
) -> OrphanedRecordAction:
    """Replace the user's action on ``composite_id`` with a new claim or ignore.

    Any earlier action of this user on the record, and every expired action, is
    removed in the same transaction, so exactly one live action per user remains.
    """

    composite_id = _require(composite_id, "id")
    user_edipi = _require(user_edipi, "user")
    kind = parse_action_type(action_type)
    now = ensure_utc(clock())
    expires_on = compute_expiry(ttl_ms, now=now)

    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        if not repositories.orphaned_records.list_active(composite_id):
            raise NotFoundError(f"Unable to locate orphaned record with id: {composite_id}")

        purged = repositories.actions.delete_for_user(composite_id, user_edipi, now=now)
        action = OrphanedRecordAction(
            composite_id=composite_id,
            user_edipi=user_edipi,
            type=kind,
            expires_on=expires_on,
        )
        repositories.actions.add(action)
        uow.commit()

    log.info(
        "User %s set %s on %s until %s (purged %d)",
        user_edipi,
        kind,
        composite_id,
        expires_on or "never",
        purged,
    )
    return action


def clear_action(
    composite_id: str,
    *,
    user_edipi: str,
    action_type: ActionType | str | None,
    unit_of_work_factory: Callable[[], OrphanUnitOfWork],
    clock: Clock = utcnow,
) -> None:
    """Remove the user's action of the given type; succeeds when nothing matched."""

    composite_id = _require(composite_id, "id")
    user_edipi = _require(user_edipi, "user")
    kind = parse_action_type(action_type)
    now = ensure_utc(clock())

    with unit_of_work_factory() as uow:
        removed = uow.repositories.actions.delete_matching(
            composite_id, user_edipi, kind, now=now
        )
        uow.commit()

    log.info("User %s cleared %s on %s (%d rows removed)", user_edipi, kind, composite_id, removed)
