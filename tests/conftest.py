from __future__ import annotations

import json
from collections.abc import Callable, Mapping, Sequence
from datetime import UTC, datetime
from pathlib import Path

import pytest

from mcp_device_timeline.core.models import RawRecord
from mcp_device_timeline.core.sources.base import TimelineQuery

LOGON_PROCESS = r"C:\Windows\System32\svchost.exe"


def _at(hour: int, minute: int = 0, second: int = 0, *, day: int = 30) -> datetime:
    return datetime(2025, 12, day, hour, minute, second, tzinfo=UTC)


class FakeSource:
    """In-memory log source that records how it was called."""

    def __init__(self, records: Sequence[RawRecord] = (), error: Exception | None = None) -> None:
        self.records = list(records)
        self.error = error
        self.calls: list[tuple[str, datetime, TimelineQuery]] = []

    async def fetch(self, device: str, start: datetime, query: TimelineQuery) -> list[RawRecord]:
        self.calls.append((device, start, query))
        if self.error is not None:
            raise self.error
        return list(self.records)


@pytest.fixture
def record() -> Callable[..., RawRecord]:
    def _make(
        event_id: int,
        timestamp: datetime,
        fields: Mapping[str, str] | None = None,
        channel: str | None = None,
    ) -> RawRecord:
        return RawRecord(timestamp=timestamp, event_id=event_id, fields=fields or {}, channel=channel)

    return _make


@pytest.fixture
def sample_records(record) -> list[RawRecord]:
    return [
        record(12, _at(8), {"StartTime": "2025-12-30T08:00:00.5000000Z"}, "System"),
        record(4624, _at(8, 1), {
            "TargetUserName": "alice",
            "TargetLogonId": "0x3e7a1",
            "LogonType": "2",
            "ProcessName": LOGON_PROCESS,
        }, "Security"),
        record(4800, _at(10), {"TargetUserName": "alice", "TargetLogonId": "0x3e7a1"}, "Security"),
        record(4801, _at(10, 5), {"TargetUserName": "alice", "TargetLogonId": "0x3e7a1"}, "Security"),
        record(4647, _at(17, 20), {"TargetUserName": "alice", "TargetLogonId": "0x3e7a1"}, "Security"),
        record(1074, _at(17, 30), {
            "param1": r"C:\Windows\System32\RuntimeBroker.exe",
            "param3": "Other (Unplanned)",
            "param6": "restart",
            "param7": r"HOST\alice",
        }, "System"),
    ]


@pytest.fixture
def write_export() -> Callable[[Path, Sequence[dict | str]], None]:
    def _write(path: Path, lines: Sequence[dict | str]) -> None:
        path.write_text(
            "\n".join(line if isinstance(line, str) else json.dumps(line) for line in lines) + "\n",
            encoding="utf-8",
        )

    return _write


@pytest.fixture
def at() -> Callable[..., datetime]:
    """Build a UTC datetime on 2025-12-30 (or another December day)."""
    return _at


@pytest.fixture
def logon_process() -> str:
    return LOGON_PROCESS


@pytest.fixture
def fake_source() -> Callable[..., FakeSource]:
    def _make(records: Sequence[RawRecord] = (), error: Exception | None = None) -> FakeSource:
        return FakeSource(records, error)

    return _make
