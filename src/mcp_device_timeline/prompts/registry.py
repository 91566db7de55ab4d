"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP


def investigate_prompt(device: str, timeframe: str = "day", question: str = "") -> list[dict[str, Any]]:
    """Build the messages for a device activity investigation."""
    question_line = f"Question to answer: {question}\n\n" if question else ""
    return [
        {
            "role": "system",
            "content": (
                "You are a careful forensic assistant. Reconstruct what a machine and its "
                "users were doing from event evidence only. Do not invent events; if the "
                "evidence is insufficient, say so."
            ),
        },
        {
            "role": "user",
            "content": (
                "Investigate device activity using build_timeline. Follow this workflow:\n"
                "- Call build_timeline first with the parameters below.\n"
                "- Read TimeSinceLock / TimeSinceBoot from unlock and shutdown details. "
                "NotFound means the matching lock or boot lies before the window, "
                "not that the duration was zero.\n"
                "- Mention skipped records only if they affect the answer.\n\n"
                "Call build_timeline with:\n"
                f"- device: {device}\n"
                f"- timeframe: {timeframe}\n"
                "- include_failures: true\n\n"
                f"{question_line}"
                "Return this structure:\n"
                "1) Sessions (boot to shutdown, with durations)\n"
                "2) User activity (logons, locks/unlocks, logoffs, with durations)\n"
                "3) Gaps or anomalies (NotFound pairings, unexpected shutdowns)\n"
            ),
        },
        {
            "role": "user",
            "content": [
                {"type": "text", "text": "Event kinds and pairing rules:"},
                {"type": "resource", "uri": "app://device-timeline/config/event-kinds"},
            ],
        },
    ]


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def investigate_device_activity(
        device: str,
        timeframe: str = "day",
        question: str = "",
    ) -> list[dict[str, Any]]:
        """Build a prompt for a device activity investigation."""
        return investigate_prompt(device, timeframe, question)
