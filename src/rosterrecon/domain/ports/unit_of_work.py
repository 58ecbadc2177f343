"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from types import TracebackType

    from rosterrecon.domain.ports.persistence import (
        OrgRepository,
        OrphanedRecordActionRepository,
        OrphanedRecordRepository,
        RosterHistoryRepository,
        RosterRepository,
        UnitRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection.

    The unit of work is the explicit transaction handle: nothing is persisted until
    ``commit`` and leaving the context with an exception rolls everything back.
    """

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class OrphanRepositories(RepositoryCollection):
    """Repositories required by the orphan record workflows."""

    orphaned_records: OrphanedRecordRepository
    actions: OrphanedRecordActionRepository
    roster_history: RosterHistoryRepository
    rosters: RosterRepository
    units: UnitRepository
    orgs: OrgRepository


type OrphanUnitOfWork = UnitOfWork[OrphanRepositories]
