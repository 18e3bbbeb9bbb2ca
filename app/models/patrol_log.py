"""
Patrol Log Model - Append-only checkpoint scan events of a patrol
"""
import uuid

from sqlalchemy import Column, String, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func
from atams.db import Base


class PatrolLog(Base):
    """Patrol log model for workforce schema - Table: workforce.patrol_logs"""
    __tablename__ = "patrol_logs"
    __table_args__ = {"schema": "workforce"}

    pl_id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    pl_patrol_id = Column(String(36), ForeignKey("workforce.patrols.pa_id"), nullable=False, index=True)
    pl_checkpoint_id = Column(String(36), ForeignKey("workforce.checkpoints.cp_id"), nullable=True, index=True)
    pl_status = Column(String(20), nullable=False, default="scanned")  # 'scanned' or 'issue_reported'
    pl_scanned_at = Column(DateTime(timezone=True), nullable=False)
    pl_location = Column(JSON, nullable=True)  # {"lat": -6.2, "lng": 106.8, "formatted_address": "..."}
    pl_created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
