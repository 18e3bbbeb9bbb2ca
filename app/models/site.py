"""
Site Model - Physical locations with a circular geofence
"""
import uuid

from sqlalchemy import Column, String, DateTime, Float, Integer
from sqlalchemy.sql import func
from atams.db import Base


class Site(Base):
    """Site model for workforce schema - Table: workforce.sites"""
    __tablename__ = "sites"
    __table_args__ = {"schema": "workforce"}

    si_id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    si_organization_id = Column(String(36), nullable=False, index=True)
    si_name = Column(String(255), nullable=False)
    si_latitude = Column(Float, nullable=False)
    si_longitude = Column(Float, nullable=False)
    si_radius_m = Column(Integer, nullable=False)  # Geofence radius in meters
    si_created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    si_updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)
