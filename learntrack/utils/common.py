"""
Small helpers shared by stores, services and routes.
"""

import math
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp; the database columns are timezone-less."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso_format(dt: datetime) -> str:
    """Format a naive UTC datetime as ISO string with Z suffix."""
    return dt.isoformat() + "Z"


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (round() would pick the even neighbour)."""
    return int(math.floor(value + 0.5))


def normalize_email(email: str) -> str:
    return email.strip().lower()
