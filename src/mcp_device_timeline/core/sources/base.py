"""Log source interface and structured query."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from ..classifier import (
    EVENT_COMPUTER_SHUTDOWN,
    EVENT_COMPUTER_STARTED,
    EVENT_USER_LOGGED_OFF,
    EVENT_USER_LOGGED_ON,
    EVENT_WORKSTATION_LOCKED,
    EVENT_WORKSTATION_UNLOCKED,
    LOGON_TYPE_NAMES,
)
from ..models import RawRecord


@dataclass(frozen=True, slots=True)
class ChannelQuery:
    """Event ids to fetch from one log channel.

    `data_filters` restricts records to those whose named field takes one of
    the listed values.
    """

    channel: str
    event_ids: tuple[int, ...]
    data_filters: Mapping[str, tuple[str, ...]] = field(default_factory=dict)

    def matches(self, record: RawRecord) -> bool:
        if record.channel is not None and record.channel.casefold() != self.channel.casefold():
            return False
        if record.event_id not in self.event_ids:
            return False
        for name, allowed in self.data_filters.items():
            if record.fields.get(name) not in allowed:
                return False
        return True


@dataclass(frozen=True, slots=True)
class TimelineQuery:
    channels: tuple[ChannelQuery, ...]

    def matches(self, record: RawRecord) -> bool:
        return any(q.matches(record) for q in self.channels)


def default_query() -> TimelineQuery:
    """Query covering every event the classifier understands."""
    return TimelineQuery(
        channels=(
            ChannelQuery(
                channel="System",
                event_ids=(EVENT_COMPUTER_STARTED, EVENT_COMPUTER_SHUTDOWN),
            ),
            ChannelQuery(
                channel="Security",
                event_ids=(
                    EVENT_WORKSTATION_LOCKED,
                    EVENT_WORKSTATION_UNLOCKED,
                    EVENT_USER_LOGGED_OFF,
                ),
            ),
            ChannelQuery(
                channel="Security",
                event_ids=(EVENT_USER_LOGGED_ON,),
                data_filters={"LogonType": tuple(str(t) for t in sorted(LOGON_TYPE_NAMES))},
            ),
        )
    )


class LogSource(Protocol):
    """Fetches raw records for a device from `start` onwards."""

    async def fetch(
        self,
        device: str,
        start: datetime,
        query: TimelineQuery,
    ) -> Sequence[RawRecord]:
        """Return matching records in any order.

        Raises SourceUnavailableError when the device or log cannot be queried.
        """
        ...
