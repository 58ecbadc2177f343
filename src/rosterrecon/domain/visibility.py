"""Which orphaned records a user can currently act on."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from rosterrecon.domain.errors import InvalidArgumentError
from rosterrecon.domain.timekeeping import ensure_utc, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable

    from rosterrecon.domain.model import VisibleOrphan
    from rosterrecon.domain.ports.unit_of_work import OrphanUnitOfWork
    from rosterrecon.domain.timekeeping import Clock

log = getLogger(__name__)


def list_visible_orphans(
    *,
    user_edipi: str,
    org_id: int,
    unit_of_work_factory: Callable[[], OrphanUnitOfWork],
    clock: Clock = utcnow,
) -> list[VisibleOrphan]:
    """Return one aggregate per composite id that ``user_edipi`` may act on in ``org_id``.

    Soft-deleted rows, subjects whose latest roster event in every unit is a deletion,
    records claimed by another user and records the user ignores are left out. Locks
    past their expiry count as absent. An empty list is a valid answer.
    """

    if not user_edipi:
        raise InvalidArgumentError("A user is required to list orphaned records")

    with unit_of_work_factory() as uow:
        visible = list(
            uow.repositories.orphaned_records.visible_for(
                user_edipi=user_edipi,
                org_id=org_id,
                now=ensure_utc(clock()),
            )
        )

    log.debug("User %s sees %d orphaned records in org %s", user_edipi, len(visible), org_id)
    return visible
