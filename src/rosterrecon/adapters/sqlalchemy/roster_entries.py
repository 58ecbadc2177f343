"""Roster entry gateway backed by the same SQLAlchemy store."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from rosterrecon.domain.errors import ConflictError, InvalidArgumentError, NotFoundError
from rosterrecon.domain.model import ChangeType, Roster, RosterHistory
from rosterrecon.domain.timekeeping import ensure_utc, utcnow

if TYPE_CHECKING:
    from collections.abc import Callable

    from rosterrecon.domain.model import RosterEntryData
    from rosterrecon.domain.ports.unit_of_work import OrphanUnitOfWork
    from rosterrecon.domain.timekeeping import Clock

log = getLogger(__name__)


@dataclass(slots=True)
class SqlAlchemyRosterEntryGateway:
    """Create and remove roster entries, recording each change in the roster history.

    Each call commits its own unit of work. Deleting an entry this gateway created
    undoes the creation exactly: the roster row and its ``ADDED`` history row both go.
    Any other entry is removed with a ``DELETED`` history row appended.
    """

    unit_of_work_factory: Callable[[], OrphanUnitOfWork]
    clock: Clock = field(default=utcnow)
    _added_history: dict[int, int] = field(default_factory=dict, init=False, repr=False)

    def create_roster_entry(
        self, *, org_id: int, role: str | None, entry: RosterEntryData
    ) -> Roster:
        if entry.unit_id is None:
            raise InvalidArgumentError("A unit is required to add a roster entry.")
        if not entry.edipi:
            raise InvalidArgumentError("An edipi is required to add a roster entry.")

        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            unit = repositories.units.get(entry.unit_id)
            if unit is None or unit.org_id != org_id:
                raise NotFoundError(f"Unable to locate unit {entry.unit_id} in org {org_id}")
            if repositories.rosters.find(edipi=entry.edipi, unit_id=entry.unit_id) is not None:
                raise ConflictError(
                    f"Roster entry for {entry.edipi} already exists in unit {entry.unit_id}"
                )

            roster = Roster(
                edipi=entry.edipi,
                unit_id=entry.unit_id,
                first_name=entry.first_name,
                last_name=entry.last_name,
                phone_number=entry.phone_number,
            )
            added = RosterHistory(
                edipi=roster.edipi,
                unit_id=roster.unit_id,
                change_type=ChangeType.ADDED,
                timestamp=ensure_utc(self.clock()),
            )
            repositories.rosters.add(roster)
            repositories.roster_history.add(added)
            uow.commit()

        assert roster.id is not None
        assert added.id is not None
        self._added_history[roster.id] = added.id
        log.debug("Added roster entry %s (role=%s)", roster.id, role)
        return roster

    def delete_roster_entry(self, entry: Roster) -> None:
        if entry.id is None:
            raise InvalidArgumentError("Roster entry has not been persisted")

        added_id = self._added_history.get(entry.id)
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            stored = repositories.rosters.get(entry.id)
            if stored is None:
                raise NotFoundError(f"Unable to locate roster entry {entry.id}")
            repositories.rosters.remove(stored)

            added = repositories.roster_history.get(added_id) if added_id is not None else None
            if added is not None:
                repositories.roster_history.remove(added)
            else:
                repositories.roster_history.add(
                    RosterHistory(
                        edipi=stored.edipi,
                        unit_id=stored.unit_id,
                        change_type=ChangeType.DELETED,
                        timestamp=ensure_utc(self.clock()),
                    )
                )
            uow.commit()

        self._added_history.pop(entry.id, None)
        log.debug("Removed roster entry %s (undone=%s)", entry.id, added is not None)


if TYPE_CHECKING:
    from rosterrecon.domain.ports.collaborators import RosterEntryGateway

    _gateway_check: RosterEntryGateway = SqlAlchemyRosterEntryGateway(lambda: NotImplemented)
