"""
Patrol Model - One guard's round of checkpoint scans at a site
"""
import uuid

from sqlalchemy import Column, BigInteger, String, DateTime, Text, ForeignKey
from sqlalchemy.sql import func
from atams.db import Base


class Patrol(Base):
    """Patrol model for workforce schema - Table: workforce.patrols"""
    __tablename__ = "patrols"
    __table_args__ = {"schema": "workforce"}

    pa_id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    pa_organization_id = Column(String(36), nullable=False, index=True)
    pa_site_id = Column(String(36), ForeignKey("workforce.sites.si_id"), nullable=False, index=True)
    pa_user_id = Column(BigInteger, nullable=True, index=True)  # References SSO users(u_id)
    pa_status = Column(String(12), nullable=False, default="started")  # 'started', 'completed' or 'incomplete'
    pa_started_at = Column(DateTime(timezone=True), nullable=False)
    pa_ended_at = Column(DateTime(timezone=True), nullable=True)
    pa_notes = Column(Text, nullable=True)
    pa_created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
