"""Formatting helpers for timestamps, sizes and text display."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Optional

BYTES_PER_MB = 1024 * 1024


def ts_to_datetime(timestamp: float) -> datetime:
    """Convert Unix seconds timestamp to local datetime."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).astimezone()


def format_datetime(dt: datetime) -> str:
    """Format datetime as 'YYYY-MM-DD HH:MM'."""
    return dt.strftime("%Y-%m-%d %H:%M")


def format_size(size_bytes: int) -> str:
    """'1.5MB' above one mebibyte, whole kilobytes below."""
    if size_bytes > BYTES_PER_MB:
        return f"{size_bytes / BYTES_PER_MB:.1f}MB"
    return f"{size_bytes // 1024}KB"


def format_age(modified: datetime, now: Optional[float] = None) -> str:
    """Compact age: '42s', '5m', '3h', or '07 Mar 25' past a day."""
    current = time.time() if now is None else now
    elapsed = max(0, int(current - modified.timestamp()))
    if elapsed < 60:
        return f"{elapsed}s"
    if elapsed < 3600:
        return f"{elapsed // 60}m"
    if elapsed < 86400:
        return f"{elapsed // 3600}h"
    return modified.strftime("%d %b %y")


def truncate(text: str, max_length: int) -> str:
    """Truncate text to max_length, appending '…' if truncated."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"
