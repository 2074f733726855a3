"""
Core Utilities.

Shared utility functions used across the backend and the note client.
All modules should import utilities from this module.
"""

import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values in the application should be timezone-naive
    and assumed to be UTC. This ensures consistent behavior across
    the codebase and simplifies database storage.

    Returns:
        Current UTC time with tzinfo stripped
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def now_ms() -> int:
    """Return the current time as integer epoch milliseconds."""
    return time.time_ns() // 1_000_000


def from_epoch_ms(value: int) -> datetime:
    """Convert epoch milliseconds to a timezone-naive UTC datetime."""
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc).replace(tzinfo=None)
