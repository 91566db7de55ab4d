"""JSON-lines export source.

Reads `<export_dir>/<device>.jsonl` (optionally `.jsonl.gz`), one event per
line:

    {"timestamp": "2025-12-30T08:00:00Z", "event_id": 4800,
     "channel": "Security", "fields": {"TargetUserName": "alice"}}
"""

from __future__ import annotations

import gzip
import json
import logging
import re
import zlib
from collections.abc import Sequence
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

import aiofiles
from aiofiles.threadpool import wrap

from ..errors import SourceUnavailableError
from ..models import RawRecord
from ..time_window import parse_iso_dt
from .base import TimelineQuery

LOGGER = logging.getLogger(__name__)

_DEVICE_RE = re.compile(r"^[A-Za-z0-9._-]+$")


@asynccontextmanager
async def _open_text(path: Path, *, encoding: str):
    """Open an export for async text reading (plain or gzip)."""
    if path.suffix.lower() == ".gz":
        f = gzip.open(path, mode="rt", encoding=encoding, errors="replace")
        af = wrap(f)
        try:
            yield af
        finally:
            await af.close()
    else:
        async with aiofiles.open(path, encoding=encoding, errors="replace") as f:
            yield f


def parse_record_line(line: str) -> RawRecord | None:
    """Parse one export line, or return None when it is not a usable record."""
    s = line.strip()
    if not s:
        return None
    try:
        obj: Any = json.loads(s)
    except json.JSONDecodeError:
        return None
    if not isinstance(obj, dict):
        return None

    ts_val = obj.get("timestamp")
    id_val = obj.get("event_id")
    if not isinstance(ts_val, str) or isinstance(id_val, bool):
        return None
    try:
        ts = parse_iso_dt(ts_val)
        event_id = int(id_val)
    except (TypeError, ValueError):
        return None

    raw_fields = obj.get("fields") or {}
    if not isinstance(raw_fields, dict):
        return None
    fields = {str(k): "" if v is None else str(v) for k, v in raw_fields.items()}

    channel = obj.get("channel")
    return RawRecord(
        timestamp=ts,
        event_id=event_id,
        fields=fields,
        channel=channel if isinstance(channel, str) else None,
    )


class JsonLinesLogSource:
    """Serve records from per-device JSON-lines exports."""

    def __init__(self, export_dir: str | Path, *, encoding: str = "utf-8") -> None:
        self.export_dir = Path(export_dir)
        self.encoding = encoding

    def path_for(self, device: str) -> Path:
        if not _DEVICE_RE.match(device) or device in (".", ".."):
            raise SourceUnavailableError(f"Invalid device name for export lookup: {device!r}")
        for suffix in (".jsonl", ".jsonl.gz"):
            candidate = self.export_dir / f"{device}{suffix}"
            if candidate.is_file():
                return candidate
        raise SourceUnavailableError(f"No event export for {device!r} in {self.export_dir}")

    async def fetch(
        self,
        device: str,
        start: datetime,
        query: TimelineQuery,
    ) -> Sequence[RawRecord]:
        path = self.path_for(device)
        records: list[RawRecord] = []
        skipped = 0
        try:
            async with _open_text(path, encoding=self.encoding) as f:
                line_no = 0
                async for line in f:
                    line_no += 1
                    if not line.strip():
                        continue
                    record = parse_record_line(line)
                    if record is None:
                        skipped += 1
                        LOGGER.warning("%s:%d: not a valid event record, skipped", path, line_no)
                        continue
                    if record.timestamp < start or not query.matches(record):
                        continue
                    records.append(record)
        except (OSError, EOFError, zlib.error) as exc:
            # Truncated or corrupt gzip exports surface as EOFError / zlib.error.
            raise SourceUnavailableError(f"Cannot read {path}: {exc}") from exc

        LOGGER.info("Read %d records from %s (%d invalid lines)", len(records), path, skipped)
        return records
