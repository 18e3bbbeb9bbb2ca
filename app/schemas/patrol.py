"""
Patrol Schemas for patrols and their checkpoint scan logs
"""
from typing import Optional, Literal, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import fix_pg_timezone

PatrolStatus = Literal["started", "completed", "incomplete"]
PatrolLogStatus = Literal["scanned", "issue_reported"]


class ScanLocation(BaseModel):
    """Where the guard stood when scanning"""
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)
    formatted_address: Optional[str] = None


class PatrolStartRequest(BaseModel):
    pa_organization_id: str
    pa_site_id: str
    pa_notes: Optional[str] = None


class PatrolEndRequest(BaseModel):
    pa_organization_id: str
    outcome: Literal["completed", "incomplete"] = "completed"


class ScanRequest(BaseModel):
    """Request schema for recording a checkpoint scan by id"""
    pa_organization_id: str
    checkpoint_id: str
    status: PatrolLogStatus = "scanned"
    location: Optional[ScanLocation] = None
    scanned_at: Optional[datetime] = None  # Device time for scans queued offline; must not go backwards


class QrScanRequest(BaseModel):
    """Request schema for recording a checkpoint scan by QR token"""
    pa_organization_id: str
    qr_code: str = Field(..., min_length=1)
    status: PatrolLogStatus = "scanned"
    location: Optional[ScanLocation] = None


class PatrolLog(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    pl_id: str
    pl_patrol_id: str
    pl_checkpoint_id: Optional[str] = None
    pl_status: PatrolLogStatus
    pl_scanned_at: datetime
    pl_location: Optional[ScanLocation] = None
    checkpoint_name: Optional[str] = None

    @field_validator('pl_scanned_at', mode='before')
    @classmethod
    def fix_datetime_timezone(cls, v):
        return fix_pg_timezone(v)


class Patrol(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    pa_id: str
    pa_organization_id: str
    pa_site_id: str
    pa_user_id: Optional[int] = None
    pa_status: PatrolStatus
    pa_started_at: datetime
    pa_ended_at: Optional[datetime] = None
    pa_notes: Optional[str] = None
    duration_minutes: Optional[int] = None
    duration_label: str = "Ongoing"

    @field_validator('pa_started_at', 'pa_ended_at', mode='before')
    @classmethod
    def fix_datetime_timezone(cls, v):
        return fix_pg_timezone(v)


class PatrolProgress(BaseModel):
    scanned: int
    total: int
    ratio: float


class PatrolDetail(Patrol):
    """Patrol with its timeline, ordered by scan time"""
    site_name: Optional[str] = None
    user_name: Optional[str] = None
    logs: List[PatrolLog] = []
    progress: Optional[PatrolProgress] = None


class SweepResult(BaseModel):
    """Result of marking abandoned patrols incomplete"""
    updated_count: int
    cutoff: datetime
    message: str
