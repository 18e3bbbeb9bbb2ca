"""
Checkpoint Schemas
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import fix_pg_timezone


class CheckpointBase(BaseModel):
    cp_name: str
    cp_description: Optional[str] = None
    cp_qr_code: str = Field(..., min_length=1, max_length=255)


class CheckpointCreate(CheckpointBase):
    cp_order: Optional[int] = None  # Defaults to the end of the site's sequence


class CheckpointUpdate(BaseModel):
    cp_name: Optional[str] = None
    cp_description: Optional[str] = None
    cp_order: Optional[int] = None
    cp_is_active: Optional[bool] = None


class Checkpoint(CheckpointBase):
    model_config = ConfigDict(from_attributes=True)

    cp_id: str
    cp_site_id: str
    cp_organization_id: str
    cp_order: int
    cp_is_active: bool
    cp_created_at: datetime
    cp_updated_at: Optional[datetime] = None

    @field_validator('cp_created_at', 'cp_updated_at', mode='before')
    @classmethod
    def fix_datetime_timezone(cls, v):
        return fix_pg_timezone(v)
