"""Common formatting helpers shared by the CLI and the engine."""

from datetime import datetime
from typing import Optional

SIZE_UNITS = ("KB", "MB", "GB", "TB")


def format_duration(seconds: float) -> str:
    """Render a sync pass duration.

    Sub-second passes are the common case on a fast network, so they are
    shown in milliseconds: ``850ms``, ``4.2s``, ``2m 05s``, ``1h 03m``.
    """
    seconds = max(seconds, 0.0)
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"

    minutes, secs = divmod(int(round(seconds)), 60)
    if minutes < 60:
        return f"{minutes}m {secs:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes:02d}m"


def format_size(num_bytes: int) -> str:
    """Render stored recording size in 1024-byte units, e.g. ``512 B`` or ``1.5 MB``."""
    if num_bytes < 1024:
        return f"{int(num_bytes)} B"

    value = float(num_bytes)
    for unit in SIZE_UNITS:
        value /= 1024
        if value < 1024 or unit == SIZE_UNITS[-1]:
            break
    return f"{value:.1f} {unit}"


def format_timestamp(value: Optional[datetime], never: str = "Never") -> str:
    """Render an optional timestamp for display."""
    if value is None:
        return never
    return value.strftime("%Y-%m-%d %H:%M:%S")


def truncate(text: str, limit: int = 200) -> str:
    """Shorten text for log output."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
