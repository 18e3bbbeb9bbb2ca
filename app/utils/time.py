"""
Time helpers shared by patrol and attendance computations
"""
import math
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values"""
    return int(math.floor(value + 0.5))


def as_naive_utc(value: datetime) -> datetime:
    """Timestamps are compared as naive UTC; aware values are converted"""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, rounded to nearest"""
    delta = as_naive_utc(end) - as_naive_utc(start)
    return round_half_up(delta.total_seconds() / 60)


def to_local(value: datetime, tz_name: Optional[str] = None) -> datetime:
    """
    Wall-clock view of a stored timestamp.

    Naive values are stored as UTC. Without a timezone name the value is
    returned as recorded.
    """
    if not tz_name:
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(ZoneInfo(tz_name))


def epoch_millis(value: datetime) -> int:
    """Milliseconds since the Unix epoch; naive values are taken as UTC"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)
