"""
Incident Schemas
"""
from typing import Optional, Literal, List, Dict, Any
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import fix_pg_timezone

IncidentPriority = Literal["low", "medium", "high", "critical"]
IncidentStatus = Literal["open", "investigating", "resolved", "closed"]

INCIDENT_STATUSES = ("open", "investigating", "resolved", "closed")


class IncidentCreate(BaseModel):
    in_organization_id: str
    in_title: str = Field(..., min_length=1, max_length=255)
    in_description: Optional[str] = None
    in_priority: IncidentPriority = "medium"
    in_patrol_id: Optional[str] = None
    in_photos: List[str] = []
    in_location: Optional[Dict[str, Any]] = None


class IncidentStatusUpdate(BaseModel):
    in_organization_id: str
    status: IncidentStatus


class Incident(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    in_id: str
    in_organization_id: str
    in_patrol_id: Optional[str] = None
    in_user_id: Optional[int] = None
    in_title: str
    in_description: Optional[str] = None
    in_priority: IncidentPriority
    in_status: IncidentStatus
    in_photos: List[str] = []
    in_location: Optional[Dict[str, Any]] = None
    in_created_at: datetime
    in_updated_at: datetime
    reporter_name: Optional[str] = None
    site_id: Optional[str] = None
    site_name: Optional[str] = None

    @field_validator('in_photos', mode='before')
    @classmethod
    def default_photos(cls, v):
        return v or []

    @field_validator('in_created_at', 'in_updated_at', mode='before')
    @classmethod
    def fix_datetime_timezone(cls, v):
        return fix_pg_timezone(v)
