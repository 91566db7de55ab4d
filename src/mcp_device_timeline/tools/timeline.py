"""MCP tool implementations.

This module contains the *implementation* behind the exposed MCP tools.
Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from mcp_device_timeline.core.models import ClassificationFailure, TimelineEvent
from mcp_device_timeline.core.settings import TimelineSettings, resolve_settings
from mcp_device_timeline.core.sources import LogSource, source_from_settings
from mcp_device_timeline.core.time_window import parse_timeframe
from mcp_device_timeline.core.timeline import build_timeline
from mcp_device_timeline.tools.models import SkippedRecordOut, TimelineEventOut, TimelineResponse


def _event_out(event: TimelineEvent) -> TimelineEventOut:
    elapsed = None
    if event.pairing is not None and event.pairing.elapsed is not None:
        elapsed = int(event.pairing.elapsed.total_seconds())
    return TimelineEventOut(
        time=event.time.isoformat(),
        event_id=event.event_id,
        kind=event.kind.value,
        correlation_key=event.correlation_key,
        detail=event.detail,
        elapsed_seconds=elapsed,
    )


def _skipped_out(failure: ClassificationFailure) -> SkippedRecordOut:
    return SkippedRecordOut(
        time=failure.record.timestamp.isoformat(),
        event_id=failure.record.event_id,
        reason=failure.reason,
        message=str(failure.error),
    )


async def build_timeline_impl(
    *,
    device: str,
    timeframe: str = "day",
    include_failures: bool = True,
    source: LogSource | None = None,
    settings: TimelineSettings | None = None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Implementation for the `build_timeline` MCP tool.

    Notes
    -----
    - timeframe is "day" (since local midnight yesterday) or "all" (365 days).
    - The log source comes from settings unless one is passed in.
    - include_failures adds the list of skipped records; the count is always set.
    """
    tf = parse_timeframe(timeframe)
    cfg = resolve_settings(settings)
    src = source or source_from_settings(cfg)

    result = await build_timeline(
        device,
        tf,
        source=src,
        now=now,
        local_tz=cfg.local_tz,
        logon_process=cfg.logon_process,
    )

    response = TimelineResponse(
        device=result.device,
        timeframe=result.timeframe.value,
        since=result.start_boundary.isoformat(),
        count=len(result.events),
        events=[_event_out(e) for e in result.events],
        skipped_count=len(result.failures),
        skipped=[_skipped_out(f) for f in result.failures] if include_failures else None,
    )
    return response.model_dump(exclude_none=True)
