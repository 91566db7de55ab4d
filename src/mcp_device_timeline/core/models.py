"""Core data models for timeline reconstruction."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from types import MappingProxyType

from .errors import ClassificationError


class EventKind(str, Enum):
    """Semantic event types produced by the classifier."""

    COMPUTER_STARTED = "ComputerStarted"
    COMPUTER_SHUTDOWN = "ComputerShutdown"
    WORKSTATION_LOCKED = "WorkstationLocked"
    WORKSTATION_UNLOCKED = "WorkstationUnlocked"
    USER_LOGGED_ON = "UserLoggedOn"
    USER_LOGGED_OFF = "UserLoggedOff"


@dataclass(frozen=True, slots=True)
class RawRecord:
    """Unprocessed log record as delivered by a log source."""

    timestamp: datetime
    event_id: int
    fields: Mapping[str, str] = field(default_factory=dict)
    channel: str | None = None  # log name, diagnostics only

    def __post_init__(self) -> None:
        # Read-only view so the record stays immutable after hand-off.
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))


@dataclass(frozen=True, slots=True)
class PairingOutcome:
    """Result of pairing one end event with a pending start."""

    label: str
    elapsed: timedelta | None  # None when no start was pending

    @property
    def found(self) -> bool:
        return self.elapsed is not None


@dataclass(slots=True)
class TimelineEvent:
    """Normalized timeline entry.

    `detail` is mutable because the pair correlator appends a duration clause
    to end events; `pairing` records that this has happened.
    """

    time: datetime
    event_id: int
    kind: EventKind
    detail: str
    correlation_key: str | None = None
    pairing: PairingOutcome | None = None


@dataclass(frozen=True, slots=True)
class ClassificationFailure:
    """A record that was skipped during materialization, with the reason."""

    record: RawRecord
    error: ClassificationError

    @property
    def reason(self) -> str:
        return self.error.reason


@dataclass(frozen=True, slots=True)
class MaterializeResult:
    """Partial result of classifying a batch of records."""

    events: list[TimelineEvent]
    failures: list[ClassificationFailure]
