"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ActionType(StrEnum):
    CLAIM = "claim"
    IGNORE = "ignore"


class ChangeType(StrEnum):
    """Roster membership change kinds.

    Member names are persisted, and they sort ``ADDED < CHANGED < DELETED`` so that a
    descending sort ranks a deletion ahead of any other change with the same timestamp.
    """

    ADDED = "added"
    CHANGED = "changed"
    DELETED = "deleted"
