"""Clock helpers.

All datetimes returned here are timezone-aware UTC.
"""

import time
from datetime import datetime, timedelta, timezone


def now_unix() -> int:
    """Current Unix time in whole seconds."""
    return int(time.time())


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def add_time(delta: timedelta) -> datetime:
    """Return the current UTC time shifted by ``delta``.

    Args:
        delta: Offset to add. Negative values move into the past.

    Returns:
        Aware UTC datetime.
    """
    return utc_now() + delta
