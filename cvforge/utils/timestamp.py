"""Timestamp generation and formatting utilities."""

import threading
import time
from datetime import datetime, timezone

_stamp_lock = threading.Lock()
_last_stamp_ns = 0


def now() -> str:
    """Local time as a compact sortable string, e.g. '20251114_123456'."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def now_exact() -> str:
    """Local time in ISO 8601 with microseconds."""
    return datetime.now().isoformat()


def monotonic_stamp_ns() -> int:
    """
    Nanosecond UNIX timestamp that strictly increases within this process.

    Two calls in the same clock tick (or across a backwards clock step) still
    get distinct, ordered values.

    Returns:
        Integer nanoseconds since the epoch
    """
    global _last_stamp_ns
    with _stamp_lock:
        stamp = max(time.time_ns(), _last_stamp_ns + 1)
        _last_stamp_ns = stamp
        return stamp


def stamp_to_datetime(stamp_ns: int) -> datetime:
    """Convert a nanosecond UNIX timestamp to an aware UTC datetime."""
    return datetime.fromtimestamp(stamp_ns / 1_000_000_000, tz=timezone.utc)


def format_timestamp(iso_timestamp: str, relative: bool = False) -> str:
    """
    Format ISO 8601 timestamp to readable format.

    Args:
        iso_timestamp: ISO 8601 formatted timestamp string
        relative: If True, show relative time (e.g., "2h ago")
                 If False, show absolute time (e.g., "2025-11-13 18:45:40")

    Returns:
        Human-readable timestamp

    Examples:
        format_timestamp("2025-11-13T18:45:40.572549")
        # "2025-11-13 18:45:40"

        format_timestamp("2025-11-13T18:45:40.572549", relative=True)
        # "2h ago"
    """
    try:
        dt = datetime.fromisoformat(iso_timestamp)
    except (ValueError, TypeError):
        # Return original if parsing fails
        return iso_timestamp

    if relative:
        return _format_relative_time(dt)
    return dt.strftime("%Y-%m-%d %H:%M:%S")


def _format_relative_time(dt: datetime) -> str:
    """
    Format datetime as relative time in compact format (e.g., "2h ago").

    Aware datetimes are compared against the current UTC time, naive ones
    against local time.
    """
    current = datetime.now(tz=dt.tzinfo) if dt.tzinfo else datetime.now()
    diff = current - dt

    if diff.total_seconds() < 0:
        diff = -diff
        suffix = "from now"
    else:
        suffix = "ago"

    seconds = int(diff.total_seconds())
    minutes = seconds // 60
    hours = minutes // 60
    days = diff.days

    if seconds < 60:
        return f"{seconds}s {suffix}"
    elif minutes < 60:
        return f"{minutes}m {suffix}"
    elif hours < 24:
        return f"{hours}h {suffix}"
    else:
        return f"{days}d {suffix}"
