"""Error taxonomy for the orphan record workflows."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rosterrecon.domain.model import OrphanedRecord


class OrphanWorkflowError(RuntimeError):
    """Base class for every failure raised by the orphan record workflows."""


class InvalidArgumentError(OrphanWorkflowError):
    """Raised when required input is missing or malformed."""


class NotFoundError(OrphanWorkflowError):
    """Raised when no matching orphaned record, action or roster row exists."""


class ConflictError(OrphanWorkflowError):
    """Raised when stored state conflicts with the request, e.g. duplicate active records."""


class InternalError(OrphanWorkflowError):
    """Raised when an invariant between collaborators is violated."""


class UpstreamError(OrphanWorkflowError):
    """Raised when the reingestion collaborator fails.

    When raised after a resolution committed, ``orphaned_record`` holds the record
    that was resolved; the persisted state is final regardless of this error.
    """

    def __init__(self, message: str, *, orphaned_record: OrphanedRecord | None = None) -> None:
        super().__init__(message)
        self.orphaned_record = orphaned_record


__all__ = [
    "ConflictError",
    "InternalError",
    "InvalidArgumentError",
    "NotFoundError",
    "OrphanWorkflowError",
    "UpstreamError",
]
