"""
Incident Model - Guard-reported security incidents
"""
import uuid

from sqlalchemy import Column, BigInteger, String, DateTime, Text, JSON, ForeignKey
from atams.db import Base


class Incident(Base):
    """Incident model for workforce schema - Table: workforce.incidents"""
    __tablename__ = "incidents"
    __table_args__ = {"schema": "workforce"}

    in_id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    in_organization_id = Column(String(36), nullable=False, index=True)
    in_patrol_id = Column(String(36), ForeignKey("workforce.patrols.pa_id"), nullable=True, index=True)
    in_user_id = Column(BigInteger, nullable=True, index=True)  # Reporter, references SSO users(u_id)
    in_title = Column(String(255), nullable=False)
    in_description = Column(Text, nullable=True)
    in_priority = Column(String(10), nullable=False, default="medium")  # low, medium, high, critical
    in_status = Column(String(15), nullable=False, default="open")  # open, investigating, resolved, closed
    in_photos = Column(JSON, nullable=True)  # list of photo URLs
    in_location = Column(JSON, nullable=True)
    in_created_at = Column(DateTime(timezone=True), nullable=False)
    in_updated_at = Column(DateTime(timezone=True), nullable=False)
