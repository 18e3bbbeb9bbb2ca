"""
Checkpoint Model - QR-identified points a patrol scans within a site
"""
import uuid

from sqlalchemy import Column, String, DateTime, Integer, Boolean, Text, ForeignKey
from sqlalchemy.sql import func
from atams.db import Base


class Checkpoint(Base):
    """Checkpoint model for workforce schema - Table: workforce.checkpoints"""
    __tablename__ = "checkpoints"
    __table_args__ = {"schema": "workforce"}

    cp_id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    cp_site_id = Column(String(36), ForeignKey("workforce.sites.si_id"), nullable=False, index=True)
    cp_organization_id = Column(String(36), nullable=False, index=True)
    cp_name = Column(String(255), nullable=False)
    cp_description = Column(Text, nullable=True)
    cp_qr_code = Column(String(255), nullable=False, unique=True, index=True)
    cp_order = Column(Integer, nullable=False, default=0)  # Advisory display/patrol sequence
    cp_is_active = Column(Boolean, nullable=False, default=True)
    cp_created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    cp_updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)
