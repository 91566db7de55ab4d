"""Time-window helpers.

Converts the user-facing timeframe selector into the UTC start boundary passed
to the log source.
"""

from __future__ import annotations

from datetime import UTC, datetime, time, timedelta, tzinfo
from enum import Enum

ALL_LOOKBACK_DAYS = 365


class Timeframe(str, Enum):
    DAY = "day"
    ALL = "all"


def parse_timeframe(value: str | Timeframe) -> Timeframe:
    """Parse a case-insensitive timeframe name."""
    if isinstance(value, Timeframe):
        return value
    try:
        return Timeframe(value.strip().lower())
    except ValueError as exc:
        valid = ", ".join(t.value for t in Timeframe)
        raise ValueError(f"Unknown timeframe '{value}'. Valid values: {valid}.") from exc


def parse_iso_dt(s: str) -> datetime:
    """Parse ISO8601 datetime. If tz is missing, assume UTC."""
    dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def resolve_start_boundary(
    timeframe: Timeframe,
    *,
    now: datetime | None = None,
    local_tz: tzinfo | None = None,
) -> datetime:
    """Return the UTC start boundary for a timeframe.

    DAY is local midnight one day back; ALL is 365 days back. Without
    `local_tz` the system zone is used.
    """
    now = now or datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    if timeframe is Timeframe.DAY:
        if local_tz is None:
            # Naive local midnight; astimezone() applies the system rules for that date.
            yesterday = now.astimezone().date() - timedelta(days=1)
            start_local = datetime.combine(yesterday, time.min).astimezone()
        else:
            yesterday = now.astimezone(local_tz).date() - timedelta(days=1)
            start_local = datetime.combine(yesterday, time.min, tzinfo=local_tz)
        return start_local.astimezone(UTC)
    if timeframe is Timeframe.ALL:
        return now.astimezone(UTC) - timedelta(days=ALL_LOOKBACK_DAYS)
    raise ValueError(f"Unsupported timeframe: {timeframe!r}")
