"""Organisations, units and roster membership."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from rosterrecon.domain.model.enums import ChangeType


@dataclass(eq=False, kw_only=True)
class Org:
    name: str
    reporting_group: str | None = None
    id: int | None = None


@dataclass(eq=False, kw_only=True)
class Unit:
    org_id: int
    name: str
    id: int | None = None


@dataclass(eq=False, kw_only=True)
class Roster:
    """Current membership of one individual in one unit."""

    edipi: str
    unit_id: int
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None
    id: int | None = None


@dataclass(eq=False, kw_only=True)
class RosterHistory:
    """One append-only membership event for ``(unit_id, edipi)``."""

    edipi: str
    unit_id: int
    change_type: ChangeType
    timestamp: datetime
    id: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class RosterEntryData:
    """Input for materialising a roster entry while resolving an orphan.

    ``unit_id`` doubles as the resolution hint: when given, existing history in that
    unit is backdated before a new entry is considered.
    """

    edipi: str
    unit_id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone_number: str | None = None
