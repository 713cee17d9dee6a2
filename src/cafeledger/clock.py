"""Timestamp helpers shared by models, services and exports.

Stored timestamps are UTC. Everything that groups by calendar day converts to
the configured local zone first (``None`` means the host's own zone).
"""

from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive values (as SQLite returns them) and normalise aware ones."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_local(value: datetime, tz: tzinfo | None = None) -> datetime:
    return ensure_utc(value).astimezone(tz)


def local_day(value: datetime, tz: tzinfo | None = None) -> date:
    """Calendar day of ``value`` as seen on this device."""

    return to_local(value, tz).date()


def local_now(tz: tzinfo | None = None) -> datetime:
    return utc_now().astimezone(tz)


def parse_timestamp(raw: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``."""

    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def isoformat_z(value: datetime) -> str:
    """Format as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""

    utc = ensure_utc(value)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
