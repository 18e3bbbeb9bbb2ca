"""
Attendance Schemas for time entries, rollups and anomalies
"""
from typing import Optional, Literal, List, Dict, Any
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import fix_pg_timezone

UNKNOWN_EMPLOYEE = "Unknown Employee"

AnomalyType = Literal["extreme_duration", "habitual_late", "ghost_shift", "location_mismatch", "pattern_break"]
AnomalySeverity = Literal["low", "medium", "high", "critical"]


class TimeEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    te_id: str
    te_organization_id: str
    te_user_id: int
    te_site_id: Optional[str] = None
    te_clock_in: datetime
    te_clock_out: Optional[datetime] = None
    te_duration_minutes: Optional[int] = None
    te_notes: Optional[str] = None
    te_location: Optional[Dict[str, Any]] = None

    @field_validator('te_clock_in', 'te_clock_out', mode='before')
    @classmethod
    def fix_datetime_timezone(cls, v):
        return fix_pg_timezone(v)


class AttendanceEntry(BaseModel):
    """Time entry joined with the employee's profile, as read by analytics"""
    id: str
    user_id: int
    clock_in: datetime
    clock_out: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    notes: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or UNKNOWN_EMPLOYEE


class ClockInRequest(BaseModel):
    te_organization_id: str
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    te_notes: Optional[str] = None


class ClockOutRequest(BaseModel):
    te_organization_id: str


class DailyHours(BaseModel):
    date: str  # YYYY-MM-DD
    hours: float
    count: int


class TopWorker(BaseModel):
    user_id: int
    name: str
    hours: float


class LateArrival(BaseModel):
    date: str  # YYYY-MM-DD
    user_id: int
    name: str
    minutes_late: int


class AttendanceStats(BaseModel):
    total_entries: int
    avg_hours_per_day: float
    late_arrivals: int
    early_departures: int
    missing_clock_out: int
    daily_hours: List[DailyHours]
    top_workers: List[TopWorker]
    late_arrivals_list: List[LateArrival]


class AttendanceAnalytics(BaseModel):
    entries: List[AttendanceEntry]
    stats: AttendanceStats


class Anomaly(BaseModel):
    """Derived finding over time entries; recomputed on every call, never stored"""
    id: str
    user_id: int
    user_name: str
    date: datetime
    type: AnomalyType
    severity: AnomalySeverity
    description: str
    metric_value: Optional[str] = None
    related_entry_id: Optional[str] = None
