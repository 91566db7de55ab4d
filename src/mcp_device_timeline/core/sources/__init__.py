"""Log sources that feed raw records into the timeline engine."""

from __future__ import annotations

from ..settings import TimelineSettings
from .base import ChannelQuery, LogSource, TimelineQuery, default_query
from .jsonl import JsonLinesLogSource
from .wevtutil import WevtutilLogSource, build_xpath, parse_event_xml


def source_from_settings(settings: TimelineSettings) -> LogSource:
    """Build the log source selected by the settings."""
    if settings.source == "jsonl":
        return JsonLinesLogSource(settings.resolved_export_dir())
    if settings.source == "wevtutil":
        return WevtutilLogSource(timeout=settings.wevtutil_timeout)
    raise ValueError(f"Unknown log source {settings.source!r}")


__all__ = [
    "ChannelQuery",
    "JsonLinesLogSource",
    "LogSource",
    "TimelineQuery",
    "WevtutilLogSource",
    "build_xpath",
    "default_query",
    "parse_event_xml",
    "source_from_settings",
]
