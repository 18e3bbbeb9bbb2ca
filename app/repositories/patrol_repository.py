"""
Patrol Repository - Data access layer for patrols
"""
from typing import Optional, List
from datetime import datetime
from sqlalchemy.orm import Session

from atams.db import BaseRepository
from app.models.patrol import Patrol


class PatrolRepository(BaseRepository[Patrol]):
    def __init__(self):
        super().__init__(Patrol)

    def get_by_id(self, db: Session, patrol_id: str) -> Optional[Patrol]:
        return db.query(Patrol).filter(Patrol.pa_id == patrol_id).first()

    def get_active_for_user(self, db: Session, user_id: int) -> Optional[Patrol]:
        """The user's patrol still in 'started' status, if any"""
        return db.query(Patrol).filter(
            Patrol.pa_user_id == user_id,
            Patrol.pa_status == "started"
        ).first()

    def get_by_organization(
        self,
        db: Session,
        organization_id: str,
        status: str = None,
        skip: int = 0,
        limit: int = 50
    ) -> List[Patrol]:
        """Most recent patrols first"""
        query = db.query(Patrol).filter(Patrol.pa_organization_id == organization_id)
        if status:
            query = query.filter(Patrol.pa_status == status)
        return query.order_by(Patrol.pa_started_at.desc()).offset(skip).limit(limit).all()

    def get_started_before(self, db: Session, cutoff_time: datetime) -> List[Patrol]:
        """Patrols still open that began before the cutoff"""
        return db.query(Patrol).filter(
            Patrol.pa_status == "started",
            Patrol.pa_started_at < cutoff_time
        ).all()
