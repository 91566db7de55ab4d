"""Response models for the timeline tool."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TimelineEventOut(BaseModel):
    time: str = Field(description="ISO-8601 UTC timestamp of the originating record.")
    event_id: int = Field(description="Windows event id of the originating record.")
    kind: str = Field(description="Semantic event kind, e.g. WorkstationLocked.")
    correlation_key: str | None = Field(
        default=None, description="Logon id linking events of one session, when present."
    )
    detail: str = Field(description="Human-readable summary, including pairing durations.")
    elapsed_seconds: int | None = Field(
        default=None, description="Seconds since the matching start event, for paired end events."
    )


class SkippedRecordOut(BaseModel):
    time: str
    event_id: int
    reason: str = Field(description="unrecognized | malformed | excluded")
    message: str


class TimelineResponse(BaseModel):
    device: str
    timeframe: str
    since: str = Field(description="UTC start boundary passed to the log source.")
    count: int
    events: list[TimelineEventOut] = Field(default_factory=list)
    skipped_count: int = 0
    skipped: list[SkippedRecordOut] | None = None
