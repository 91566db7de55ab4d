"""Event correlation engine."""

from __future__ import annotations

from .classifier import classify
from .correlator import BOOT_CATEGORY, LOCK_CATEGORY, correlate, correlate_pairs
from .errors import (
    ClassificationError,
    ExcludedRecordError,
    MalformedRecordError,
    SourceUnavailableError,
    TimelineError,
    UnrecognizedEventError,
)
from .materializer import materialize
from .models import EventKind, RawRecord, TimelineEvent
from .time_window import Timeframe, resolve_start_boundary
from .timeline import build_timeline

__all__ = [
    "BOOT_CATEGORY",
    "LOCK_CATEGORY",
    "ClassificationError",
    "EventKind",
    "ExcludedRecordError",
    "MalformedRecordError",
    "RawRecord",
    "SourceUnavailableError",
    "Timeframe",
    "TimelineError",
    "TimelineEvent",
    "UnrecognizedEventError",
    "build_timeline",
    "classify",
    "correlate",
    "correlate_pairs",
    "materialize",
    "resolve_start_boundary",
]
