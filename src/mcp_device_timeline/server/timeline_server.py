"""MCP server entrypoint (stdio transport).

This module wires together:
- Tools: build a device activity timeline
- Resources: help text, the event-kind table and the response schema
- Prompts: an investigation workflow built on the timeline tool

Run locally (stdio):
    python -m mcp_device_timeline.server.timeline_server
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from typing import Any

from mcp.server.fastmcp import FastMCP

from mcp_device_timeline.core.settings import configure_logging
from mcp_device_timeline.prompts.registry import register_prompts
from mcp_device_timeline.resources.registry import register_resources
from mcp_device_timeline.tools.timeline import build_timeline_impl

LOGGER = logging.getLogger(__name__)


mcp = FastMCP("device-timeline", json_response=True)

register_resources(mcp)
register_prompts(mcp)


@mcp.tool()
async def build_timeline(
    device: str,
    timeframe: str = "day",
    include_failures: bool = True,
) -> dict[str, Any]:
    """Return the activity timeline (boot, shutdown, lock, unlock, logon, logoff) of a device.

    Parameters
    ----------
    device:
        Host name of the device. Use "localhost" for the machine running the server.
    timeframe:
        "day" covers everything since local midnight yesterday; "all" covers 365 days.
    include_failures:
        When true, list the records that were skipped and why.

    Returns
    -------
    dict:
        {"device", "timeframe", "since", "count", "events", "skipped_count", "skipped"}
        Unlock and shutdown events carry TimeSinceLock / TimeSinceBoot in their detail,
        or NotFound when the matching lock/boot lies outside the window.
    """
    return await build_timeline_impl(
        device=device,
        timeframe=timeframe,
        include_failures=include_failures,
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Start the MCP server over stdio."""
    configure_logging()
    LOGGER.debug("Starting MCP server (transport=stdio)")
    _ = argv or sys.argv[1:]
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
