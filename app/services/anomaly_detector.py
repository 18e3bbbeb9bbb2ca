"""
Attendance Anomaly Detector - Rule-based findings over time entries

Anomalies are derived on every call and never stored. The result depends only
on the entries and the supplied "now", so the same inputs give the same list.

Rules, evaluated per employee:
    extreme_duration  shifts over 16 hours (critical) or closed shifts under 45 minutes (medium)
    habitual_late     3+ clock-ins after 09:10 in the last 7 days (high, dated now)
    pattern_break     a single Sunday shift for someone with more than 10 weekday shifts (low)

ghost_shift and location_mismatch are reserved anomaly types; they need
clock-out location data that time entries do not capture yet.
"""
from typing import Dict, List, Optional
from datetime import datetime, timedelta

from app.core.config import settings
from app.schemas.attendance import AttendanceEntry, Anomaly
from app.utils.time import as_naive_utc, epoch_millis, round_half_up, to_local

LONG_SHIFT_MINUTES = 16 * 60
SHORT_SHIFT_MINUTES = 45

LATENESS_WINDOW_DAYS = 7
LATENESS_GRACE_MINUTES = 10
HABITUAL_LATE_THRESHOLD = 3

SUNDAY = 6
PATTERN_BREAK_MIN_WEEKDAY_SHIFTS = 10


def _duration_anomalies(entry: AttendanceEntry) -> List[Anomaly]:
    minutes = entry.duration_minutes
    if minutes is None:
        return []

    if minutes > LONG_SHIFT_MINUTES:
        hours = round_half_up(minutes / 60)
        return [Anomaly(
            id=f"dur_high_{entry.id}",
            user_id=entry.user_id,
            user_name=entry.display_name,
            date=entry.clock_in,
            type="extreme_duration",
            severity="critical",
            description=f"Extremely long shift detected ({hours} hours). Likely a forgotten clock-out.",
            metric_value=f"{hours}h",
            related_entry_id=entry.id
        )]

    if minutes < SHORT_SHIFT_MINUTES and entry.clock_out is not None:
        return [Anomaly(
            id=f"dur_low_{entry.id}",
            user_id=entry.user_id,
            user_name=entry.display_name,
            date=entry.clock_in,
            type="extreme_duration",
            severity="medium",
            description=f"Suspiciously short shift ({minutes} minutes).",
            metric_value=f"{minutes}m",
            related_entry_id=entry.id
        )]

    return []


def _is_late(clock_in: datetime, work_start_hour: int) -> bool:
    threshold = work_start_hour * 60 + LATENESS_GRACE_MINUTES
    return clock_in.hour * 60 + clock_in.minute > threshold


def _lateness_anomaly(
    user_id: int,
    user_name: str,
    entries: List[AttendanceEntry],
    now: datetime,
    work_start_hour: int,
    tz_name: Optional[str]
) -> Optional[Anomaly]:
    since = as_naive_utc(now) - timedelta(days=LATENESS_WINDOW_DAYS)
    late_count = sum(
        1 for e in entries
        if as_naive_utc(e.clock_in) > since and _is_late(to_local(e.clock_in, tz_name), work_start_hour)
    )
    if late_count < HABITUAL_LATE_THRESHOLD:
        return None

    return Anomaly(
        id=f"habitual_late_{user_id}_{epoch_millis(now)}",
        user_id=user_id,
        user_name=user_name,
        date=now,
        type="habitual_late",
        severity="high",
        description=f"Employee was late {late_count} times in the last {LATENESS_WINDOW_DAYS} days.",
        metric_value=f"{late_count} incidents"
    )


def _pattern_break_anomaly(
    user_id: int,
    user_name: str,
    entries: List[AttendanceEntry],
    tz_name: Optional[str]
) -> Optional[Anomaly]:
    sundays = [e for e in entries if to_local(e.clock_in, tz_name).weekday() == SUNDAY]
    weekdays = [e for e in entries if to_local(e.clock_in, tz_name).weekday() < 5]
    if len(sundays) != 1 or len(weekdays) <= PATTERN_BREAK_MIN_WEEKDAY_SHIFTS:
        return None

    sunday = sundays[0]
    return Anomaly(
        id=f"pattern_break_{sunday.id}",
        user_id=user_id,
        user_name=user_name,
        date=sunday.clock_in,
        type="pattern_break",
        severity="low",
        description="Unusual weekend shift detected for an employee who normally works M-F.",
        related_entry_id=sunday.id
    )


def compute_anomalies(
    entries: List[AttendanceEntry],
    now: datetime,
    work_start_hour: Optional[int] = None,
    tz_name: Optional[str] = None
) -> List[Anomaly]:
    """
    Evaluate every rule for every employee in the entry set

    Args:
        entries: Time entries of the analysis window
        now: Reference time for the lateness sub-window
        work_start_hour: Baseline hour for lateness (default: WORK_START_HOUR)
        tz_name: Timezone for wall-clock rules (default: ATTENDANCE_TIMEZONE)

    Returns:
        List[Anomaly]: Findings sorted by date, newest first
    """
    if work_start_hour is None:
        work_start_hour = settings.WORK_START_HOUR
    if tz_name is None:
        tz_name = settings.ATTENDANCE_TIMEZONE

    by_user: Dict[int, List[AttendanceEntry]] = {}
    for entry in sorted(entries, key=lambda e: as_naive_utc(e.clock_in)):
        by_user.setdefault(entry.user_id, []).append(entry)

    anomalies: List[Anomaly] = []
    for user_id, user_entries in by_user.items():
        user_name = user_entries[0].display_name

        for entry in user_entries:
            anomalies.extend(_duration_anomalies(entry))

        late = _lateness_anomaly(user_id, user_name, user_entries, now, work_start_hour, tz_name)
        if late:
            anomalies.append(late)

        pattern = _pattern_break_anomaly(user_id, user_name, user_entries, tz_name)
        if pattern:
            anomalies.append(pattern)

    anomalies.sort(key=lambda a: as_naive_utc(a.date), reverse=True)
    return anomalies
