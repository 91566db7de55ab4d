from __future__ import annotations

import random
from datetime import timedelta

from mcp_device_timeline.core.correlator import (
    BOOT_CATEGORY,
    LOCK_CATEGORY,
    correlate,
    correlate_pairs,
    format_elapsed,
)
from mcp_device_timeline.core.models import EventKind, TimelineEvent


def _ev(kind: EventKind, time, event_id: int = 0, detail: str = "User:alice") -> TimelineEvent:
    return TimelineEvent(time=time, event_id=event_id, kind=kind, detail=detail)


def _lock(time) -> TimelineEvent:
    return _ev(EventKind.WORKSTATION_LOCKED, time, 4800)


def _unlock(time) -> TimelineEvent:
    return _ev(EventKind.WORKSTATION_UNLOCKED, time, 4801)


def _boot(time) -> TimelineEvent:
    return _ev(EventKind.COMPUTER_STARTED, time, 12, "StartTime:x")


def _shutdown(time) -> TimelineEvent:
    return _ev(EventKind.COMPUTER_SHUTDOWN, time, 1074, "Process:p, User:u, App:a, Comment:")


def test_lock_then_unlock(at) -> None:
    unlock = _unlock(at(10, 5))
    correlate_pairs([_lock(at(10)), unlock], LOCK_CATEGORY)
    assert unlock.detail == "User:alice, TimeSinceLock:00:05:00"
    assert unlock.pairing is not None
    assert unlock.pairing.elapsed == timedelta(minutes=5)


def test_unlock_without_lock_is_not_found(at) -> None:
    unlock = _unlock(at(10, 5))
    report = correlate_pairs([unlock], LOCK_CATEGORY)
    assert unlock.detail.endswith("TimeSinceLock:NotFound")
    assert unlock.pairing is not None and not unlock.pairing.found
    assert report.unmatched_ends == [unlock]


def test_most_recent_lock_wins(at) -> None:
    first, second = _lock(at(10)), _lock(at(10, 2))
    unlock = _unlock(at(10, 10))
    report = correlate_pairs([first, second, unlock], LOCK_CATEGORY)

    assert unlock.detail.endswith("TimeSinceLock:00:08:00")
    assert report.matched == [(second, unlock)]
    assert report.discarded_starts == [first]
    assert first.detail == "User:alice"


def test_boot_then_shutdown(at) -> None:
    shutdown = _shutdown(at(17, 30))
    correlate_pairs([_boot(at(8)), shutdown], BOOT_CATEGORY)
    assert "TimeSinceBoot:09:30:00" in shutdown.detail


def test_second_unlock_after_pairing_is_not_found(at) -> None:
    first, second = _unlock(at(10, 5)), _unlock(at(10, 7))
    correlate_pairs([_lock(at(10)), first, second], LOCK_CATEGORY)
    assert first.detail.endswith("TimeSinceLock:00:05:00")
    assert second.detail.endswith("TimeSinceLock:NotFound")


def test_trailing_lock_stays_open(at) -> None:
    trailing = _lock(at(18))
    report = correlate_pairs([_lock(at(10)), _unlock(at(11)), trailing], LOCK_CATEGORY)
    assert report.open_start is trailing


def test_input_order_does_not_matter(at) -> None:
    def build():
        return [
            _lock(at(9)),
            _unlock(at(9, 30)),
            _unlock(at(10)),
            _lock(at(11)),
            _lock(at(11, 15)),
            _unlock(at(12)),
        ]

    expected = build()
    correlate_pairs(expected, LOCK_CATEGORY)

    shuffled = build()
    random.Random(7).shuffle(shuffled)
    correlate_pairs(shuffled, LOCK_CATEGORY)

    def key(events):
        return sorted((e.time, e.kind.value, e.detail) for e in events)

    assert key(shuffled) == key(expected)


def test_second_pass_changes_nothing(at) -> None:
    events = [_lock(at(10)), _unlock(at(10, 5)), _unlock(at(11)), _boot(at(8)), _shutdown(at(17))]
    correlate(events)
    before = [(e.detail, e.pairing) for e in events]

    correlate(events)
    assert [(e.detail, e.pairing) for e in events] == before


def test_passes_are_independent(at) -> None:
    unlock = _unlock(at(10, 5))
    shutdown = _shutdown(at(17))
    reports = correlate([_boot(at(8)), unlock, shutdown])

    assert unlock.detail.endswith("TimeSinceLock:NotFound")
    assert shutdown.detail.endswith("TimeSinceBoot:09:00:00")
    assert set(reports) == {"lock", "boot"}


def test_other_kinds_are_untouched(at) -> None:
    logon = _ev(EventKind.USER_LOGGED_ON, at(9), 4624, "User:alice, LogonType:Interactive")
    correlate([logon, _unlock(at(10))])
    assert logon.detail == "User:alice, LogonType:Interactive"
    assert logon.pairing is None


def test_empty_input_is_noop() -> None:
    reports = correlate([])
    assert all(not r.matched and not r.unmatched_ends for r in reports.values())


def test_ties_keep_input_order(at) -> None:
    # Same timestamp: the later start in input order is the pending one.
    first, second = _lock(at(10)), _lock(at(10))
    unlock = _unlock(at(10, 1))
    report = correlate_pairs([first, second, unlock], LOCK_CATEGORY)
    assert report.matched[0][0] is second
    assert report.discarded_starts[0] is first


def test_format_elapsed_does_not_wrap_days() -> None:
    assert format_elapsed(timedelta(days=1, hours=6, seconds=7)) == "30:00:07"
    assert format_elapsed(timedelta(seconds=59.9)) == "00:00:59"
