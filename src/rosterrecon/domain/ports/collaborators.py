"""Ports for the external collaborators of the resolution workflow."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rosterrecon.domain.model import ReingestResult, Roster, RosterEntryData


@runtime_checkable
class RosterEntryGateway(Protocol):
    """Creates roster entries and reverses that creation when a resolution fails."""

    def create_roster_entry(
        self, *, org_id: int, role: str | None, entry: RosterEntryData
    ) -> Roster: ...

    def delete_roster_entry(self, entry: Roster) -> None: ...


@runtime_checkable
class DocumentReingester(Protocol):
    """Requests a fresh ingestion run for one source document."""

    def reingest_document(self, document_id: str) -> ReingestResult: ...
