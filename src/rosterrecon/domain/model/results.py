"""Outcome types returned by the resolution workflow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rosterrecon.domain.model.orphans import OrphanedRecord


@dataclass(frozen=True, slots=True)
class ReingestResult:
    records_ingested: int
    lambda_invocation_count: int


@dataclass(frozen=True, slots=True)
class ResolutionItem:
    records_ingested: int
    lambda_invocation_count: int
    orphaned_record: OrphanedRecord


@dataclass(frozen=True, slots=True)
class ResolutionResult:
    records_ingested: int
    lambda_invocation_count: int
    items: tuple[ResolutionItem, ...]
