"""
Time Entry Model - Clock-in to clock-out shifts
"""
import uuid

from sqlalchemy import Column, BigInteger, String, DateTime, Integer, Text, JSON, ForeignKey
from sqlalchemy.sql import func
from atams.db import Base


class TimeEntry(Base):
    """Time entry model for workforce schema - Table: workforce.time_entries"""
    __tablename__ = "time_entries"
    __table_args__ = {"schema": "workforce"}

    te_id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    te_organization_id = Column(String(36), nullable=False, index=True)
    te_user_id = Column(BigInteger, nullable=False, index=True)  # References SSO users(u_id)
    te_site_id = Column(String(36), ForeignKey("workforce.sites.si_id"), nullable=True, index=True)
    te_clock_in = Column(DateTime(timezone=True), nullable=False, index=True)
    te_clock_out = Column(DateTime(timezone=True), nullable=True)
    te_duration_minutes = Column(Integer, nullable=True)  # Null while the shift is open
    te_notes = Column(Text, nullable=True)
    te_location = Column(JSON, nullable=True)
    te_created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
