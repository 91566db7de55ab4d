from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

from mcp_device_timeline.core.errors import SourceUnavailableError
from mcp_device_timeline.core.settings import (
    SOURCE_KINDS,
    configure_logging,
    parse_source_kind,
    parse_timeout,
    resolve_settings,
)
from mcp_device_timeline.core.sources import source_from_settings
from mcp_device_timeline.core.time_window import Timeframe
from mcp_device_timeline.core.timeline import TimelineResult, build_timeline


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Reconstruct a device activity timeline from boot, lock and logon events."
    )
    p.add_argument("device", help="Host name, or localhost for this machine")
    p.add_argument(
        "--timeframe",
        choices=[t.value for t in Timeframe],
        default=Timeframe.DAY.value,
        help="day: since local midnight yesterday; all: last 365 days. Default: day",
    )
    p.add_argument("--source", choices=SOURCE_KINDS, default=None, help="Log source (default from env)")
    p.add_argument("--export-dir", default=None, help="Directory with <device>.jsonl exports")
    p.add_argument("--timeout", default=None, help="wevtutil timeout in seconds")
    p.add_argument("--show-skipped", action="store_true", help="List records that were skipped")
    return p


def _print_result(result: TimelineResult, *, show_skipped: bool) -> None:
    for e in result.events:
        ts = e.time.strftime("%Y-%m-%d %H:%M:%S")
        print(f"{ts} {e.event_id:>5} {e.kind.value:<20} {e.detail}")

    print(f"\nFound {len(result.events)} events since {result.start_boundary.isoformat()}.")
    if result.failures:
        print(f"Skipped {len(result.failures)} records.")
    if show_skipped:
        for f in result.failures:
            print(f"  {f.record.timestamp.isoformat()} {f.record.event_id} [{f.reason}] {f.error}")


def main(argv: Sequence[str] | None = None) -> None:
    args = _parser().parse_args(argv)
    configure_logging()

    try:
        cfg = resolve_settings()
        if args.source:
            cfg = replace(cfg, source=parse_source_kind(args.source))
        if args.export_dir:
            cfg = replace(cfg, export_dir=Path(args.export_dir).expanduser())
        if args.timeout:
            cfg = replace(cfg, wevtutil_timeout=parse_timeout(args.timeout))

        result = asyncio.run(
            build_timeline(
                args.device,
                Timeframe(args.timeframe),
                source=source_from_settings(cfg),
                local_tz=cfg.local_tz,
                logon_process=cfg.logon_process,
            )
        )
    except SourceUnavailableError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(2)

    _print_result(result, show_skipped=args.show_skipped)


if __name__ == "__main__":
    main()
