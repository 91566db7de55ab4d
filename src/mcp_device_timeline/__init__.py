"""Device activity timeline reconstruction from power, lock and logon events."""

from __future__ import annotations

__version__ = "0.1.0"
