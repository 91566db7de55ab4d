from __future__ import annotations

import time
from datetime import UTC, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pytest

from mcp_device_timeline.core.time_window import (
    Timeframe,
    parse_iso_dt,
    parse_timeframe,
    resolve_start_boundary,
)

EST = timezone(timedelta(hours=-5))
CET = timezone(timedelta(hours=1))


def test_parse_iso_dt_assumes_utc() -> None:
    dt = parse_iso_dt("2025-12-31T10:00:00")
    assert dt == datetime(2025, 12, 31, 10, 0, 0, tzinfo=UTC)


def test_parse_timeframe_is_case_insensitive() -> None:
    assert parse_timeframe(" DAY ") is Timeframe.DAY
    assert parse_timeframe(Timeframe.ALL) is Timeframe.ALL


def test_parse_timeframe_rejects_unknown() -> None:
    with pytest.raises(ValueError):
        parse_timeframe("week")


def test_day_is_local_midnight_yesterday_in_utc() -> None:
    now = datetime(2025, 12, 31, 12, 0, 0, tzinfo=UTC)
    start = resolve_start_boundary(Timeframe.DAY, now=now, local_tz=EST)
    assert start == datetime(2025, 12, 30, 5, 0, 0, tzinfo=UTC)
    assert start.tzinfo is UTC


def test_day_uses_local_date_not_utc_date() -> None:
    # 03:00 UTC on Dec 31 is still Dec 30 in New York.
    now = datetime(2025, 12, 31, 3, 0, 0, tzinfo=UTC)
    start = resolve_start_boundary(Timeframe.DAY, now=now, local_tz=EST)
    assert start == datetime(2025, 12, 29, 5, 0, 0, tzinfo=UTC)


def test_day_east_of_utc() -> None:
    now = datetime(2025, 12, 31, 12, 0, 0, tzinfo=UTC)
    start = resolve_start_boundary(Timeframe.DAY, now=now, local_tz=CET)
    assert start == datetime(2025, 12, 29, 23, 0, 0, tzinfo=UTC)


def test_all_is_365_days_back() -> None:
    now = datetime(2025, 12, 31, 12, 0, 0, tzinfo=UTC)
    start = resolve_start_boundary(Timeframe.ALL, now=now, local_tz=EST)
    assert start == now - timedelta(days=365)


@pytest.fixture
def berlin() -> ZoneInfo:
    try:
        return ZoneInfo("Europe/Berlin")
    except ZoneInfoNotFoundError:
        pytest.skip("tz database not available")


@pytest.fixture
def system_tz_berlin(monkeypatch, berlin):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset not available")
    monkeypatch.setenv("TZ", "Europe/Berlin")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


def test_day_across_dst_change_with_zone(berlin) -> None:
    # Clocks went forward on 2025-03-30; midnight that day was still +01:00.
    now = datetime(2025, 3, 31, 8, 0, 0, tzinfo=UTC)
    start = resolve_start_boundary(Timeframe.DAY, now=now, local_tz=berlin)
    assert start == datetime(2025, 3, 29, 23, 0, 0, tzinfo=UTC)


def test_day_across_dst_change_with_system_zone(system_tz_berlin) -> None:
    now = datetime(2025, 3, 31, 8, 0, 0, tzinfo=UTC)
    start = resolve_start_boundary(Timeframe.DAY, now=now)
    assert start == datetime(2025, 3, 29, 23, 0, 0, tzinfo=UTC)


def test_day_in_summer_with_system_zone(system_tz_berlin) -> None:
    now = datetime(2025, 7, 15, 12, 0, 0, tzinfo=UTC)
    start = resolve_start_boundary(Timeframe.DAY, now=now)
    assert start == datetime(2025, 7, 13, 22, 0, 0, tzinfo=UTC)
