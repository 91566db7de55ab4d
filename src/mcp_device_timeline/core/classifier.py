"""Record classification.

Maps one raw Windows event record to a typed timeline event. Field lookup goes
through small per-kind structures so that absence of an optional field is an
explicit empty value rather than a silent null.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime

from .errors import ExcludedRecordError, MalformedRecordError, UnrecognizedEventError
from .models import EventKind, RawRecord, TimelineEvent

EVENT_COMPUTER_STARTED = 12
EVENT_COMPUTER_SHUTDOWN = 1074
EVENT_WORKSTATION_LOCKED = 4800
EVENT_WORKSTATION_UNLOCKED = 4801
EVENT_USER_LOGGED_ON = 4624
EVENT_USER_LOGGED_OFF = 4647

DEFAULT_LOGON_PROCESS = r"C:\Windows\System32\svchost.exe"

LOGON_TYPE_NAMES: Mapping[int, str] = {
    2: "Interactive",
    10: "RemoteDesktop",
    11: "CachedInteractive",
}

START_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Windows renders 100ns ticks (7 fractional digits); datetime keeps 6.
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def _opt(fields: Mapping[str, str], key: str) -> str:
    value = fields.get(key)
    return "" if value is None else str(value).strip()


def _key(fields: Mapping[str, str], key: str) -> str | None:
    return _opt(fields, key) or None


def _required(fields: Mapping[str, str], key: str, event_id: int) -> str:
    value = _opt(fields, key)
    if not value:
        raise MalformedRecordError(f"Event {event_id} is missing required field {key!r}")
    return value


def parse_windows_timestamp(value: str) -> datetime:
    """Parse a Windows ISO-8601 timestamp into an aware UTC datetime."""
    s = _FRACTION_RE.sub(r"\1", value.strip()).replace("Z", "+00:00")
    ts = datetime.fromisoformat(s)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC)


@dataclass(frozen=True, slots=True)
class BootFields:
    start_time: datetime

    @classmethod
    def from_fields(cls, fields: Mapping[str, str]) -> BootFields:
        raw = _required(fields, "StartTime", EVENT_COMPUTER_STARTED)
        try:
            start_time = parse_windows_timestamp(raw)
        except ValueError as exc:
            raise MalformedRecordError(f"Unparsable StartTime {raw!r}") from exc
        return cls(start_time=start_time)

    def detail(self) -> str:
        return f"StartTime:{self.start_time.strftime(START_TIME_FORMAT)}"


@dataclass(frozen=True, slots=True)
class ShutdownFields:
    process: str
    user: str
    app: str
    comment: str

    @classmethod
    def from_fields(cls, fields: Mapping[str, str]) -> ShutdownFields:
        return cls(
            process=_opt(fields, "param1"),
            user=_opt(fields, "param3"),
            app=_opt(fields, "param6"),
            comment=_opt(fields, "param7"),
        )

    def detail(self) -> str:
        return (
            f"Process:{self.process}, User:{self.user}, "
            f"App:{self.app}, Comment:{self.comment}"
        )


@dataclass(frozen=True, slots=True)
class SessionFields:
    """Lock, unlock and logoff records share the target user and logon id."""

    user: str
    logon_id: str | None

    @classmethod
    def from_fields(cls, fields: Mapping[str, str]) -> SessionFields:
        return cls(user=_opt(fields, "TargetUserName"), logon_id=_key(fields, "TargetLogonId"))

    def detail(self) -> str:
        return f"User:{self.user}"


@dataclass(frozen=True, slots=True)
class LogonFields:
    user: str
    logon_id: str | None
    logon_type: int
    process_name: str

    @classmethod
    def from_fields(cls, fields: Mapping[str, str]) -> LogonFields:
        raw = _required(fields, "LogonType", EVENT_USER_LOGGED_ON)
        try:
            logon_type = int(raw)
        except ValueError as exc:
            raise MalformedRecordError(f"Unparsable LogonType {raw!r}") from exc
        return cls(
            user=_opt(fields, "TargetUserName"),
            logon_id=_key(fields, "TargetLogonId"),
            logon_type=logon_type,
            process_name=_opt(fields, "ProcessName"),
        )

    @property
    def logon_type_name(self) -> str:
        return LOGON_TYPE_NAMES[self.logon_type]

    def detail(self) -> str:
        return f"User:{self.user}, LogonType:{self.logon_type_name}"


_Builder = Callable[[RawRecord, EventKind, str], TimelineEvent]


def _computer_started(record: RawRecord, kind: EventKind, _: str) -> TimelineEvent:
    f = BootFields.from_fields(record.fields)
    return _event(record, kind, f.detail())


def _computer_shutdown(record: RawRecord, kind: EventKind, _: str) -> TimelineEvent:
    f = ShutdownFields.from_fields(record.fields)
    return _event(record, kind, f.detail())


def _session(record: RawRecord, kind: EventKind, _: str) -> TimelineEvent:
    f = SessionFields.from_fields(record.fields)
    return _event(record, kind, f.detail(), correlation_key=f.logon_id)


def _user_logged_on(record: RawRecord, kind: EventKind, logon_process: str) -> TimelineEvent:
    f = LogonFields.from_fields(record.fields)
    if f.logon_type not in LOGON_TYPE_NAMES:
        raise ExcludedRecordError(f"LogonType {f.logon_type} is not an interactive logon")
    if f.process_name.casefold() != logon_process.casefold():
        raise ExcludedRecordError(f"Logon process {f.process_name!r} is not {logon_process!r}")
    return _event(record, kind, f.detail(), correlation_key=f.logon_id)


def _event(
    record: RawRecord,
    kind: EventKind,
    detail: str,
    *,
    correlation_key: str | None = None,
) -> TimelineEvent:
    return TimelineEvent(
        time=record.timestamp,
        event_id=record.event_id,
        kind=kind,
        detail=detail,
        correlation_key=correlation_key,
    )


EVENT_KINDS: Mapping[int, EventKind] = {
    EVENT_COMPUTER_STARTED: EventKind.COMPUTER_STARTED,
    EVENT_COMPUTER_SHUTDOWN: EventKind.COMPUTER_SHUTDOWN,
    EVENT_WORKSTATION_LOCKED: EventKind.WORKSTATION_LOCKED,
    EVENT_WORKSTATION_UNLOCKED: EventKind.WORKSTATION_UNLOCKED,
    EVENT_USER_LOGGED_ON: EventKind.USER_LOGGED_ON,
    EVENT_USER_LOGGED_OFF: EventKind.USER_LOGGED_OFF,
}

# Labels of the values rendered into TimelineEvent.detail, per kind.
DETAIL_FIELDS: Mapping[EventKind, str] = {
    EventKind.COMPUTER_STARTED: "StartTime",
    EventKind.COMPUTER_SHUTDOWN: "Process, User, App, Comment",
    EventKind.WORKSTATION_LOCKED: "User",
    EventKind.WORKSTATION_UNLOCKED: "User",
    EventKind.USER_LOGGED_ON: "User, LogonType",
    EventKind.USER_LOGGED_OFF: "User",
}

_BUILDERS: Mapping[EventKind, _Builder] = {
    EventKind.COMPUTER_STARTED: _computer_started,
    EventKind.COMPUTER_SHUTDOWN: _computer_shutdown,
    EventKind.WORKSTATION_LOCKED: _session,
    EventKind.WORKSTATION_UNLOCKED: _session,
    EventKind.USER_LOGGED_ON: _user_logged_on,
    EventKind.USER_LOGGED_OFF: _session,
}

SUPPORTED_EVENT_IDS: tuple[int, ...] = tuple(EVENT_KINDS)


def classify(record: RawRecord, *, logon_process: str = DEFAULT_LOGON_PROCESS) -> TimelineEvent:
    """Classify a raw record into a timeline event.

    Raises a ClassificationError subclass when the event id is unknown, a
    required field is malformed, or a logon record is outside the accepted
    logon types / process.
    """
    kind = EVENT_KINDS.get(record.event_id)
    if kind is None:
        raise UnrecognizedEventError(record.event_id)
    return _BUILDERS[kind](record, kind, logon_process)
