"""Timezone helpers shared by services and schemas."""

from __future__ import annotations

from datetime import UTC, date, datetime


def coerce_utc(dt: datetime) -> datetime:
    """Return ``dt`` as an aware UTC datetime (naive values are taken as UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def utc_date(dt: datetime) -> date:
    """Calendar date of ``dt`` in UTC."""
    return coerce_utc(dt).date()
