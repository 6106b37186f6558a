"""Time helpers. All stored timestamps are naive UTC."""

from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def expires_at(issued_at: datetime, ttl_seconds: int) -> datetime:
    return issued_at + timedelta(seconds=ttl_seconds)


def is_expired(expiry: datetime, now: datetime) -> bool:
    """A code is still good at the exact instant it expires."""
    return expiry < now
