"""
Clock

Injectable time source so quota windows and subscription expiry can be
evaluated deterministically in tests.

Timestamps are aware UTC, matching how rows are stored.
"""

from datetime import datetime, timezone
from typing import Callable


Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Current wall-clock time (UTC)."""
    return datetime.now(timezone.utc)


def month_window(now: datetime) -> tuple[datetime, datetime]:
    """Return the [start, end) bounds of the calendar month containing ``now``."""
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end
