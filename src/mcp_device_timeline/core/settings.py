"""Runtime configuration resolved from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from datetime import tzinfo
from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .classifier import DEFAULT_LOGON_PROCESS

SourceKind = Literal["jsonl", "wevtutil"]
SOURCE_KINDS: tuple[str, ...] = ("jsonl", "wevtutil")

SOURCE_ENV = "DEVICE_TIMELINE_SOURCE"
EXPORT_DIR_ENV = "DEVICE_TIMELINE_EXPORT_DIR"
TIMEOUT_ENV = "DEVICE_TIMELINE_WEVTUTIL_TIMEOUT"
LOGON_PROCESS_ENV = "DEVICE_TIMELINE_LOGON_PROCESS"
TZ_ENV = "DEVICE_TIMELINE_TZ"
LOG_LEVEL_ENV = "DEVICE_TIMELINE_LOG_LEVEL"


@dataclass(frozen=True, slots=True)
class TimelineSettings:
    source: SourceKind = "wevtutil"
    export_dir: Path | None = None  # None means the current working directory
    wevtutil_timeout: float = 60.0
    logon_process: str = DEFAULT_LOGON_PROCESS
    local_tz: tzinfo | None = None  # None means the system local zone

    def resolved_export_dir(self) -> Path:
        return (self.export_dir or Path.cwd()).resolve()


def parse_source_kind(value: str) -> SourceKind:
    name = value.strip().lower()
    if name not in SOURCE_KINDS:
        valid = ", ".join(SOURCE_KINDS)
        raise ValueError(f"Unknown log source '{value}'. Valid values: {valid}.")
    return name  # type: ignore[return-value]


def parse_timeout(value: str) -> float:
    try:
        timeout = float(value)
    except ValueError as exc:
        raise ValueError(f"{TIMEOUT_ENV} must be a number") from exc
    if timeout <= 0:
        raise ValueError(f"{TIMEOUT_ENV} must be > 0")
    return timeout


def parse_tz(value: str) -> tzinfo:
    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"{TZ_ENV} must be an IANA timezone name (e.g., Europe/Berlin)") from exc


def resolve_settings(cfg: TimelineSettings | None = None) -> TimelineSettings:
    """Return settings with environment overrides applied."""
    if cfg is None:
        cfg = TimelineSettings()

    updates: dict[str, object] = {}

    env = os.getenv(SOURCE_ENV)
    if env:
        updates["source"] = parse_source_kind(env)

    env = os.getenv(EXPORT_DIR_ENV)
    if env:
        updates["export_dir"] = Path(env).expanduser()

    env = os.getenv(TIMEOUT_ENV)
    if env:
        updates["wevtutil_timeout"] = parse_timeout(env)

    env = os.getenv(LOGON_PROCESS_ENV)
    if env:
        updates["logon_process"] = env.strip()

    env = os.getenv(TZ_ENV)
    if env:
        updates["local_tz"] = parse_tz(env)

    if not updates:
        return cfg
    return replace(cfg, **updates)


def configure_logging() -> None:
    """Configure a reasonable default logging setup.

    The MCP client typically captures stderr; keeping logs concise makes them easier to consume.
    """
    level_name = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
