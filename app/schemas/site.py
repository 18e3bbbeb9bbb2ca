"""
Site Schemas for request/response validation
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import fix_pg_timezone


class SiteBase(BaseModel):
    si_name: str
    si_latitude: float = Field(..., ge=-90, le=90)
    si_longitude: float = Field(..., ge=-180, le=180)


class SiteCreate(SiteBase):
    si_organization_id: str
    si_radius_m: Optional[int] = Field(None, gt=0)  # Falls back to DEFAULT_GEOFENCE_RADIUS_M


class SiteUpdate(BaseModel):
    si_name: Optional[str] = None
    si_latitude: Optional[float] = Field(None, ge=-90, le=90)
    si_longitude: Optional[float] = Field(None, ge=-180, le=180)
    si_radius_m: Optional[int] = Field(None, gt=0)


class SiteInDB(SiteBase):
    model_config = ConfigDict(from_attributes=True)

    si_id: str
    si_organization_id: str
    si_radius_m: int
    si_created_at: datetime
    si_updated_at: Optional[datetime] = None

    @field_validator('si_updated_at', 'si_created_at', mode='before')
    @classmethod
    def fix_datetime_timezone(cls, v):
        """Fix datetime timezone format from PostgreSQL"""
        return fix_pg_timezone(v)


class Site(SiteInDB):
    pass


class GeofenceCheckRequest(BaseModel):
    """Request schema for checking a position against a site geofence"""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class GeofenceCheckResponse(BaseModel):
    """Response schema for a geofence check"""
    si_id: str
    distance_m: float
    radius_m: int
    inside: bool
