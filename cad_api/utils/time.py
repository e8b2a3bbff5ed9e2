"""Time utility helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta


def now_utc() -> datetime:
    """Return current timezone-aware UTC datetime."""
    return datetime.now(tz=UTC)


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse a store timestamp into an aware datetime.

    Naive values are assumed to be UTC.
    """
    if value is None or value == "":
        return None

    if isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        parsed = value

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def is_expired(expires_at: str | datetime | None, now: datetime | None = None) -> bool:
    """Return True when ``expires_at`` is set and strictly in the past."""
    parsed = parse_timestamp(expires_at)
    if parsed is None:
        return False
    return parsed < (now or now_utc())


def days_ago(days: int, base: datetime | None = None) -> datetime:
    """Return the instant ``days`` days before ``base`` (or now)."""
    return (base or now_utc()) - timedelta(days=days)
