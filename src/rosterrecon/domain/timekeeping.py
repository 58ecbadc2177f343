"""Timestamp and time-to-live normalisation helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol

from rosterrecon.domain.errors import InvalidArgumentError

# Backdated roster rows are spaced by this step so none share a timestamp.
BACKDATE_STEP = timedelta(milliseconds=1)


class Clock(Protocol):
    def __call__(self) -> datetime: ...


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC instant; naive values are taken as UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def compute_expiry(ttl_ms: int | None, *, now: datetime) -> datetime | None:
    """Return the instant a lock created at ``now`` expires, or ``None`` for no expiry.

    A missing or zero TTL means the lock never expires.
    """

    if not ttl_ms:
        return None
    if ttl_ms < 0:
        raise InvalidArgumentError(f"Time to live must be positive, got {ttl_ms}ms")
    return ensure_utc(now) + timedelta(milliseconds=ttl_ms)


def convert_date_param(value: int | float | str | datetime) -> datetime:
    """Parse a report timestamp given as epoch milliseconds or an ISO-8601 string."""

    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, bool):
        raise InvalidArgumentError(f"Invalid timestamp: {value!r}")
    if isinstance(value, int | float):
        return datetime.fromtimestamp(value / 1000, tz=UTC)

    normalized = value.strip()
    if normalized.lstrip("-").isdigit():
        return datetime.fromtimestamp(int(normalized) / 1000, tz=UTC)
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError as exc:
        raise InvalidArgumentError(f"Invalid timestamp: {value}") from exc
    return ensure_utc(parsed)


__all__ = [
    "BACKDATE_STEP",
    "Clock",
    "compute_expiry",
    "convert_date_param",
    "ensure_utc",
    "utcnow",
]
