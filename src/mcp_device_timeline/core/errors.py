"""Error taxonomy for timeline building."""

from __future__ import annotations


class TimelineError(Exception):
    """Base class for timeline errors."""


class SourceUnavailableError(TimelineError):
    """The log source could not be reached or queried."""


class ClassificationError(TimelineError, ValueError):
    """A single raw record could not be turned into a timeline event."""

    reason = "invalid"


class UnrecognizedEventError(ClassificationError):
    """The record's event id is not part of the classification table."""

    reason = "unrecognized"

    def __init__(self, event_id: int) -> None:
        super().__init__(f"Unrecognized event id {event_id}")
        self.event_id = event_id


class MalformedRecordError(ClassificationError):
    """A required field is missing or cannot be parsed."""

    reason = "malformed"


class ExcludedRecordError(ClassificationError):
    """The record is of a known id but falls outside the accepted subset."""

    reason = "excluded"
