"""MCP resource registry.

Resources are addressable by URI and can be fetched by the MCP client on demand.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_device_timeline.core.classifier import DETAIL_FIELDS, EVENT_KINDS, LOGON_TYPE_NAMES
from mcp_device_timeline.core.correlator import PAIR_CATEGORIES
from mcp_device_timeline.core.settings import resolve_settings
from mcp_device_timeline.core.sources import default_query
from mcp_device_timeline.tools.models import TimelineResponse


def event_kinds_table() -> dict[str, Any]:
    """Describe classified event ids, logon types and pairing labels."""
    return {
        "event_kinds": [
            {"event_id": event_id, "kind": kind.value, "detail": DETAIL_FIELDS[kind]}
            for event_id, kind in EVENT_KINDS.items()
        ],
        "logon_types": {str(k): v for k, v in sorted(LOGON_TYPE_NAMES.items())},
        "pairs": [
            {"start": c.start.value, "end": c.end.value, "label": c.label}
            for c in PAIR_CATEGORIES
        ],
    }


def register_resources(mcp: FastMCP) -> None:
    """Register resource handlers on the MCP server."""

    @mcp.resource("app://device-timeline/help")
    def help_resource() -> str:
        """Return a short list of available resource URIs and the active source."""
        cfg = resolve_settings()
        channels = ", ".join(
            f"{q.channel}:{'/'.join(str(i) for i in q.event_ids)}" for q in default_query().channels
        )
        return (
            "Resources:\n"
            "- app://device-timeline/help\n"
            "- app://device-timeline/config/event-kinds\n"
            "- app://device-timeline/schemas/timeline-response\n"
            f"\nLog source: {cfg.source}\n"
            f"Queried channels: {channels}\n"
        )

    @mcp.resource("app://device-timeline/config/event-kinds")
    def event_kinds() -> dict[str, Any]:
        """Return the classification table."""
        return event_kinds_table()

    @mcp.resource("app://device-timeline/schemas/timeline-response")
    def timeline_schema() -> dict[str, Any]:
        """Return the JSON schema for timeline tool responses."""
        return TimelineResponse.model_json_schema()
