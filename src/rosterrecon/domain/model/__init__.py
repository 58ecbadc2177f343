"""Domain model for orphaned roster records."""

from __future__ import annotations

from .enums import ActionType, ChangeType
from .orphans import (
    OrphanedRecord,
    OrphanedRecordAction,
    OrphanReport,
    VisibleOrphan,
    compose_id,
)
from .results import ReingestResult, ResolutionItem, ResolutionResult
from .roster import Org, Roster, RosterEntryData, RosterHistory, Unit

__all__ = [
    "ActionType",
    "ChangeType",
    "Org",
    "OrphanReport",
    "OrphanedRecord",
    "OrphanedRecordAction",
    "ReingestResult",
    "ResolutionItem",
    "ResolutionResult",
    "Roster",
    "RosterEntryData",
    "RosterHistory",
    "Unit",
    "VisibleOrphan",
    "compose_id",
]
