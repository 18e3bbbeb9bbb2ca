"""
Notification Model - Organization-scoped messages for users and supervisors
"""
import uuid

from sqlalchemy import Column, BigInteger, String, DateTime, Text, Boolean
from sqlalchemy.sql import func
from atams.db import Base


class Notification(Base):
    """Notification model for workforce schema - Table: workforce.notifications"""
    __tablename__ = "notifications"
    __table_args__ = {"schema": "workforce"}

    nt_id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    nt_organization_id = Column(String(36), nullable=False, index=True)
    nt_user_id = Column(BigInteger, nullable=False, index=True)
    nt_title = Column(String(255), nullable=False)
    nt_message = Column(Text, nullable=False)
    nt_type = Column(String(10), nullable=False, default="info")  # info, success, warning, error
    nt_is_read = Column(Boolean, nullable=False, default=False)
    nt_created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
