"""
Patrol Log Repository - Append-only access to checkpoint scan events
"""
from typing import List, Optional
from sqlalchemy.orm import Session

from atams.db import BaseRepository
from app.models.patrol_log import PatrolLog


class PatrolLogRepository(BaseRepository[PatrolLog]):
    def __init__(self):
        super().__init__(PatrolLog)

    def append(self, db: Session, log_data: dict) -> PatrolLog:
        """Insert one scan row; rows are never updated or deleted"""
        db_log = PatrolLog(**log_data)
        db.add(db_log)
        db.commit()
        db.refresh(db_log)
        return db_log

    def get_timeline(self, db: Session, patrol_id: str) -> List[PatrolLog]:
        """Scan events of a patrol, oldest first"""
        return db.query(PatrolLog).filter(
            PatrolLog.pl_patrol_id == patrol_id
        ).order_by(PatrolLog.pl_scanned_at.asc(), PatrolLog.pl_created_at.asc()).all()

    def has_scanned_checkpoint(self, db: Session, patrol_id: str, checkpoint_id: str) -> bool:
        return db.query(PatrolLog).filter(
            PatrolLog.pl_patrol_id == patrol_id,
            PatrolLog.pl_checkpoint_id == checkpoint_id
        ).first() is not None

    def get_latest(self, db: Session, patrol_id: str) -> Optional[PatrolLog]:
        """Most recent scan of a patrol by scan time"""
        return db.query(PatrolLog).filter(
            PatrolLog.pl_patrol_id == patrol_id
        ).order_by(PatrolLog.pl_scanned_at.desc(), PatrolLog.pl_created_at.desc()).first()
