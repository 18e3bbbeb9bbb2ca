"""
Notification Schemas
"""
from typing import Literal
from datetime import datetime
from pydantic import BaseModel, ConfigDict, field_validator

from app.schemas.common import fix_pg_timezone

NotificationType = Literal["info", "success", "warning", "error"]


class NotificationCreate(BaseModel):
    nt_organization_id: str
    nt_user_id: int
    nt_title: str
    nt_message: str
    nt_type: NotificationType = "info"


class Notification(NotificationCreate):
    model_config = ConfigDict(from_attributes=True)

    nt_id: str
    nt_is_read: bool
    nt_created_at: datetime

    @field_validator('nt_created_at', mode='before')
    @classmethod
    def fix_datetime_timezone(cls, v):
        return fix_pg_timezone(v)
