"""
Timezone utilities for the EventBook platform.

All booking datetimes are stored and compared in UTC. Some drivers (SQLite)
hand back naive datetimes, so every value read or received goes through
ensure_utc() before it is compared.
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to aware UTC.

    Naive values are taken to already be UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def start_of_day(dt: datetime) -> datetime:
    """Midnight (UTC) of the day containing ``dt``."""
    return ensure_utc(dt).replace(hour=0, minute=0, second=0, microsecond=0)
