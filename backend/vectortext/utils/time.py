"""Epoch-millisecond helpers; message timestamps are stored in this form."""

from __future__ import annotations

import time
from datetime import datetime, timezone


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def ms_to_datetime(value: int) -> datetime:
    """Aware UTC datetime for a millisecond timestamp."""
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
