"""
Time rules for timesheets and calendar queries.
Handles duration derivation from start/end timestamps and local-day truncation.
"""
import math
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional

import pytz

from ..errors import ValidationError


def localize(dt: datetime, timezone_str: str) -> datetime:
    """
    Return `dt` as a timezone-aware datetime in the given timezone.

    Naive datetimes are taken as wall-clock time in that timezone; aware ones
    are converted.
    """
    tz = pytz.timezone(timezone_str)
    if dt.tzinfo is None:
        return tz.localize(dt)
    return dt.astimezone(tz)


def local_day(dt: datetime, timezone_str: str) -> date:
    """Calendar day of `dt` after local-midnight truncation."""
    return localize(dt, timezone_str).date()


def start_of_week(day: date) -> date:
    """Sunday on or before `day`."""
    # date.weekday(): Monday=0 .. Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def minutes_between(start: datetime, end: datetime, timezone_str: str = "UTC") -> int:
    """
    Whole minutes from start to end, half-minutes rounded up.

    A result is negative when end precedes start.
    """
    delta = localize(end, timezone_str) - localize(start, timezone_str)
    return int(math.floor(delta.total_seconds() / 60 + 0.5))


def ensure_valid_interval(start: Optional[datetime], end: Optional[datetime], timezone_str: str = "UTC") -> None:
    if start is None or end is None:
        return
    if localize(end, timezone_str) < localize(start, timezone_str):
        raise ValidationError(
            "End time cannot be before start time",
            detail={"field": "end_time", "start_time": start.isoformat(), "end_time": end.isoformat()},
        )


def resolve_duration_on_create(
    start: datetime,
    end: Optional[datetime],
    explicit_minutes: Optional[int],
    timezone_str: str = "UTC",
) -> Optional[int]:
    """
    Duration for a new timesheet.

    An explicit value wins. Otherwise it is derived when an end time exists;
    an open session (no end time) keeps no duration.
    """
    if explicit_minutes is not None:
        return explicit_minutes
    if end is None:
        return None
    return minutes_between(start, end, timezone_str)


def resolve_duration_on_update(existing: Any, patch: Dict[str, Any], timezone_str: str = "UTC") -> Optional[int]:
    """
    Duration after applying `patch` to an existing timesheet.

    Supplying `duration_minutes` in the patch suppresses recomputation for this
    call. Otherwise the effective start/end (patch over stored values) decide.
    """
    if "duration_minutes" in patch:
        return patch["duration_minutes"]
    start = patch.get("start_time", existing.start_time)
    end = patch["end_time"] if "end_time" in patch else existing.end_time
    if end is None:
        # Clearing the end time reopens the session.
        return None if "end_time" in patch else existing.duration_minutes
    return minutes_between(start, end, timezone_str)
