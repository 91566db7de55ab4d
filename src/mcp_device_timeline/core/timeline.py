"""Timeline assembly.

This module is the main integration point: it fetches records from a log
source, classifies them and runs the pairing passes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo

from .classifier import DEFAULT_LOGON_PROCESS
from .correlator import CorrelationReport, correlate
from .materializer import materialize
from .models import ClassificationFailure, TimelineEvent
from .sources.base import LogSource, TimelineQuery, default_query
from .time_window import Timeframe, parse_timeframe, resolve_start_boundary

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TimelineResult:
    """Finished timeline plus the records that could not be classified."""

    device: str
    timeframe: Timeframe
    start_boundary: datetime
    events: list[TimelineEvent]  # ascending by time
    failures: list[ClassificationFailure]
    reports: dict[str, CorrelationReport]


async def build_timeline(
    device: str,
    timeframe: Timeframe | str,
    *,
    source: LogSource,
    query: TimelineQuery | None = None,
    now: datetime | None = None,
    local_tz: tzinfo | None = None,
    logon_process: str = DEFAULT_LOGON_PROCESS,
) -> TimelineResult:
    """Build the activity timeline of `device`.

    SourceUnavailableError from the source propagates unchanged; records that
    fail classification are returned in `failures`.
    """
    if not device or not device.strip():
        raise ValueError("device must be a non-empty string")
    device = device.strip()
    timeframe = parse_timeframe(timeframe)
    query = query or default_query()

    start = resolve_start_boundary(timeframe, now=now, local_tz=local_tz)
    LOGGER.info("Fetching events for %s since %s", device, start.isoformat())
    records = await source.fetch(device, start, query)
    LOGGER.debug("Log source returned %d records", len(records))

    result = materialize(records, logon_process=logon_process)
    reports = correlate(result.events)

    return TimelineResult(
        device=device,
        timeframe=timeframe,
        start_boundary=start,
        events=sorted(result.events, key=lambda e: e.time),
        failures=result.failures,
        reports=reports,
    )
