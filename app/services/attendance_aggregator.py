"""
Attendance Aggregator - Dashboard rollups over a window of time entries
"""
from typing import Dict, List, Optional

from app.core.config import settings
from app.schemas.attendance import (
    AttendanceEntry,
    AttendanceStats,
    DailyHours,
    LateArrival,
    TopWorker
)
from app.utils.time import to_local

LATE_TOLERANCE_MINUTES = 5
LATE_ARRIVALS_LIMIT = 20
TOP_WORKERS_LIMIT = 5


def _hours(entry: AttendanceEntry) -> float:
    return entry.duration_minutes / 60 if entry.duration_minutes else 0.0


def compute_attendance_stats(
    entries: List[AttendanceEntry],
    work_start_hour: Optional[int] = None,
    work_end_hour: Optional[int] = None,
    tz_name: Optional[str] = None
) -> AttendanceStats:
    """
    Compute rollups for the attendance dashboard

    Args:
        entries: Time entries of the window, any order
        work_start_hour: Baseline for late arrivals (default: WORK_START_HOUR)
        work_end_hour: Clock-outs before this hour are early departures (default: WORK_END_HOUR)
        tz_name: Timezone for wall-clock rules (default: ATTENDANCE_TIMEZONE)

    Returns:
        AttendanceStats: late arrivals are capped at 20, worst first; daily
        hours are sorted by date; the average is over days with activity only
    """
    if work_start_hour is None:
        work_start_hour = settings.WORK_START_HOUR
    if work_end_hour is None:
        work_end_hour = settings.WORK_END_HOUR
    if tz_name is None:
        tz_name = settings.ATTENDANCE_TIMEZONE

    missing_clock_out = sum(1 for e in entries if e.clock_out is None)
    early_departures = sum(
        1 for e in entries
        if e.clock_out is not None and to_local(e.clock_out, tz_name).hour < work_end_hour
    )

    late_arrivals = []
    for entry in entries:
        clock_in = to_local(entry.clock_in, tz_name)
        minutes_late = (clock_in.hour - work_start_hour) * 60 + clock_in.minute
        if clock_in.hour < work_start_hour or minutes_late <= LATE_TOLERANCE_MINUTES:
            continue
        late_arrivals.append(LateArrival(
            date=clock_in.strftime("%Y-%m-%d"),
            user_id=entry.user_id,
            name=entry.display_name,
            minutes_late=minutes_late
        ))
    late_arrivals.sort(key=lambda item: item.minutes_late, reverse=True)
    late_arrivals = late_arrivals[:LATE_ARRIVALS_LIMIT]

    daily: Dict[str, DailyHours] = {}
    for entry in entries:
        day = to_local(entry.clock_in, tz_name).strftime("%Y-%m-%d")
        bucket = daily.setdefault(day, DailyHours(date=day, hours=0.0, count=0))
        bucket.hours += _hours(entry)
        bucket.count += 1
    daily_hours = sorted(daily.values(), key=lambda item: item.date)

    workers: Dict[int, TopWorker] = {}
    for entry in entries:
        worker = workers.setdefault(
            entry.user_id,
            TopWorker(user_id=entry.user_id, name=entry.display_name, hours=0.0)
        )
        worker.hours += _hours(entry)
    top_workers = sorted(workers.values(), key=lambda item: item.hours, reverse=True)[:TOP_WORKERS_LIMIT]

    total_hours = sum(e.duration_minutes or 0 for e in entries) / 60
    active_days = len(daily) or 1

    return AttendanceStats(
        total_entries=len(entries),
        avg_hours_per_day=total_hours / active_days,
        late_arrivals=len(late_arrivals),
        early_departures=early_departures,
        missing_clock_out=missing_clock_out,
        daily_hours=daily_hours,
        top_workers=top_workers,
        late_arrivals_list=late_arrivals
    )
