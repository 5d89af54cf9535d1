"""Conversion between Python time values and Hastur wire timestamps.

Hastur timestamps are integer microseconds since the Unix epoch.
"""

import math
import time
from datetime import UTC, datetime, timedelta
from decimal import Decimal

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MICROSECOND = timedelta(microseconds=1)

Timestamp = datetime | float | int | None


def to_micros(ts: Timestamp = None) -> int:
    """Convert a timestamp to integer microseconds since the epoch.

    Args:
        ts: An aware or naive datetime (naive values are local time),
            Unix seconds as int or float, or None for the current time.

    Returns:
        Microseconds since epoch, truncated toward zero.

    Raises:
        TypeError: If ``ts`` is not one of the accepted types.
        ValueError: If ``ts`` is a NaN or infinite float.
    """
    if ts is None:
        return time.time_ns() // 1000
    if isinstance(ts, datetime):
        delta = ts.astimezone(UTC) - _EPOCH
        return delta // _ONE_MICROSECOND
    if isinstance(ts, bool) or not isinstance(ts, (int, float)):
        raise TypeError(f"unsupported timestamp type: {type(ts).__name__}")
    if isinstance(ts, int):
        return ts * 1_000_000
    if not math.isfinite(ts):
        raise ValueError(f"timestamp must be finite, got {ts!r}")
    # Scale the shortest round-tripping decimal, not the binary float.
    return int(Decimal(repr(ts)) * 1_000_000)


def from_micros(value: int) -> datetime:
    """Convert wire microseconds back to an aware UTC datetime."""
    return _EPOCH + timedelta(microseconds=value)
