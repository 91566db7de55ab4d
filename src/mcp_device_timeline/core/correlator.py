"""Start/end pairing of timeline events.

Each pairing category is scanned chronologically with a single pending-start
slot. A newer start replaces an unconsumed older one (most recent start wins);
an end event consumes the pending start and gets the elapsed time appended to
its detail, or `NotFound` when nothing is pending.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum

from .models import EventKind, PairingOutcome, TimelineEvent

LOGGER = logging.getLogger(__name__)

NOT_FOUND = "NotFound"


class PairState(str, Enum):
    IDLE = "idle"
    PENDING_OPEN = "pending_open"


@dataclass(frozen=True, slots=True)
class PairCategory:
    """A start/end kind pair and the label of the duration it produces."""

    name: str
    start: EventKind
    end: EventKind
    label: str

    def __contains__(self, kind: object) -> bool:
        return kind is self.start or kind is self.end


LOCK_CATEGORY = PairCategory(
    name="lock",
    start=EventKind.WORKSTATION_LOCKED,
    end=EventKind.WORKSTATION_UNLOCKED,
    label="TimeSinceLock",
)
BOOT_CATEGORY = PairCategory(
    name="boot",
    start=EventKind.COMPUTER_STARTED,
    end=EventKind.COMPUTER_SHUTDOWN,
    label="TimeSinceBoot",
)
PAIR_CATEGORIES: tuple[PairCategory, ...] = (LOCK_CATEGORY, BOOT_CATEGORY)


@dataclass(slots=True)
class CorrelationReport:
    """What a single correlation pass did."""

    category: PairCategory
    matched: list[tuple[TimelineEvent, TimelineEvent]] = field(default_factory=list)
    unmatched_ends: list[TimelineEvent] = field(default_factory=list)
    discarded_starts: list[TimelineEvent] = field(default_factory=list)
    open_start: TimelineEvent | None = None  # still pending when the scan ended


@dataclass(slots=True)
class _Scan:
    report: CorrelationReport
    state: PairState = PairState.IDLE
    pending: TimelineEvent | None = None

    def on_start(self, event: TimelineEvent) -> None:
        if self.state is PairState.PENDING_OPEN and self.pending is not None:
            self.report.discarded_starts.append(self.pending)
        self.pending = event
        self.state = PairState.PENDING_OPEN

    def on_end(self, event: TimelineEvent) -> None:
        label = self.report.category.label
        if self.state is PairState.PENDING_OPEN and self.pending is not None:
            start = self.pending
            self.report.matched.append((start, event))
            _annotate(event, PairingOutcome(label=label, elapsed=event.time - start.time))
            self.pending = None
            self.state = PairState.IDLE
        else:
            self.report.unmatched_ends.append(event)
            _annotate(event, PairingOutcome(label=label, elapsed=None))


def format_elapsed(elapsed: timedelta) -> str:
    """Format a duration as HH:MM:SS with total (unwrapped) hours."""
    total = int(elapsed.total_seconds())
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def _annotate(event: TimelineEvent, outcome: PairingOutcome) -> None:
    # Detail is appended to at most once per event.
    if event.pairing is not None:
        return
    value = format_elapsed(outcome.elapsed) if outcome.elapsed is not None else NOT_FOUND
    event.detail = f"{event.detail}, {outcome.label}:{value}"
    event.pairing = outcome


def correlate_pairs(
    events: Sequence[TimelineEvent],
    category: PairCategory,
) -> CorrelationReport:
    """Run one pairing pass over the events of `category`.

    The input order does not matter: the pass works on a copy sorted by time
    (ties keep input order). End events are annotated in place.
    """
    scan = _Scan(report=CorrelationReport(category=category))
    ordered = sorted((e for e in events if e.kind in category), key=lambda e: e.time)

    for event in ordered:
        if event.kind is category.start:
            scan.on_start(event)
        else:
            scan.on_end(event)

    scan.report.open_start = scan.pending
    LOGGER.debug(
        "Pairing %s: %d matched, %d without start, %d starts discarded",
        category.name,
        len(scan.report.matched),
        len(scan.report.unmatched_ends),
        len(scan.report.discarded_starts),
    )
    return scan.report


def correlate(events: Sequence[TimelineEvent]) -> dict[str, CorrelationReport]:
    """Run every pairing pass; passes are independent of each other."""
    return {category.name: correlate_pairs(events, category) for category in PAIR_CATEGORIES}
