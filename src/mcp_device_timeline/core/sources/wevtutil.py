"""Windows event log source backed by `wevtutil qe`.

Each channel query runs as its own `wevtutil` process rendering XML, which is
parsed into RawRecords. Remote devices are reached with `/r:<device>`.
"""

from __future__ import annotations

import asyncio
import logging
import shlex
import socket
import xml.etree.ElementTree as ET
from collections.abc import Sequence
from datetime import UTC, datetime

from ..classifier import parse_windows_timestamp
from ..errors import SourceUnavailableError
from ..models import RawRecord
from .base import ChannelQuery, TimelineQuery

LOGGER = logging.getLogger(__name__)

WEVTUTIL = "wevtutil"
LOCAL_DEVICES = frozenset({"localhost", ".", "127.0.0.1", "::1"})


def _xpath_literal(value: str) -> str:
    # XPath 1.0 string literals have no escape syntax.
    if "'" in value and '"' in value:
        raise ValueError(f"XPath filter value cannot contain both quote characters: {value!r}")
    if "'" in value:
        return f'"{value}"'
    return f"'{value}'"


def build_xpath(query: ChannelQuery, start: datetime) -> str:
    """Render a channel query as a wevtutil XPath filter."""
    ids = " or ".join(f"EventID={i}" for i in query.event_ids)
    since = start.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.000Z")
    xpath = f"*[System[({ids}) and TimeCreated[@SystemTime>='{since}']]"
    for name, allowed in query.data_filters.items():
        values = " or ".join(
            f"Data[@Name={_xpath_literal(name)}]={_xpath_literal(v)}" for v in allowed
        )
        xpath += f" and EventData[({values})]"
    return xpath + "]"


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(elem: ET.Element, name: str) -> ET.Element | None:
    return elem.find(f"{{*}}{name}")


def _parse_event(event: ET.Element, channel: str | None) -> RawRecord | None:
    system = _child(event, "System")
    if system is None:
        return None

    id_elem = _child(system, "EventID")
    time_elem = _child(system, "TimeCreated")
    if id_elem is None or id_elem.text is None or time_elem is None:
        return None
    try:
        event_id = int(id_elem.text.strip())
        ts = parse_windows_timestamp(time_elem.get("SystemTime", ""))
    except ValueError:
        return None

    channel_elem = _child(system, "Channel")
    if channel_elem is not None and channel_elem.text:
        channel = channel_elem.text.strip()

    fields: dict[str, str] = {}
    for section in ("EventData", "UserData"):
        data = _child(event, section)
        if data is None:
            continue
        position = 0
        for item in data.iter():
            if item is data or _local_name(item.tag) != "Data":
                continue
            position += 1
            name = item.get("Name") or f"param{position}"
            fields[name] = (item.text or "").strip()

    return RawRecord(timestamp=ts, event_id=event_id, fields=fields, channel=channel)


def parse_event_xml(text: str, channel: str | None = None) -> list[RawRecord]:
    """Parse rendered event XML (`<Events>` root or a single `<Event>`)."""
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise SourceUnavailableError(f"Unparsable event XML: {exc}") from exc

    events = [root] if _local_name(root.tag) == "Event" else root.iterfind(".//{*}Event")
    records: list[RawRecord] = []
    for event in events:
        record = _parse_event(event, channel)
        if record is None:
            LOGGER.warning("Event without id or timestamp in %s output, skipped", channel)
            continue
        records.append(record)
    return records


def is_local_device(device: str) -> bool:
    name = device.strip().casefold()
    return name in LOCAL_DEVICES or name == socket.gethostname().casefold()


class WevtutilLogSource:
    """Query local or remote Windows event logs through wevtutil."""

    def __init__(self, *, timeout: float = 60.0, executable: str = WEVTUTIL) -> None:
        self.timeout = timeout
        self.executable = executable

    def command_for(self, device: str, query: ChannelQuery, start: datetime) -> list[str]:
        cmd = [
            self.executable,
            "qe",
            query.channel,
            f"/q:{build_xpath(query, start)}",
            "/f:xml",
            "/e:Events",
        ]
        if not is_local_device(device):
            cmd.append(f"/r:{device}")
        return cmd

    async def _run(self, cmd: list[str]) -> str:
        LOGGER.debug("Running %s", shlex.join(cmd))
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise SourceUnavailableError(f"Cannot start {cmd[0]}: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except TimeoutError as exc:
            proc.kill()
            await proc.wait()
            raise SourceUnavailableError(
                f"{cmd[0]} timed out after {self.timeout:g}s"
            ) from exc

        if proc.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise SourceUnavailableError(
                f"{cmd[0]} exited with {proc.returncode}: {message or 'no output'}"
            )
        return stdout.decode("utf-8", errors="replace")

    async def fetch(
        self,
        device: str,
        start: datetime,
        query: TimelineQuery,
    ) -> Sequence[RawRecord]:
        records: list[RawRecord] = []
        for channel_query in query.channels:
            cmd = self.command_for(device, channel_query, start)
            output = await self._run(cmd)
            if not output.strip():
                continue
            records.extend(parse_event_xml(output, channel=channel_query.channel))
        LOGGER.info("Fetched %d records from %s", len(records), device)
        return records
