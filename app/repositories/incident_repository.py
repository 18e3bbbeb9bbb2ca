"""
Incident Repository - Data access layer for incidents
"""
from typing import Optional, List
from sqlalchemy.orm import Session

from atams.db import BaseRepository
from app.models.incident import Incident


class IncidentRepository(BaseRepository[Incident]):
    def __init__(self):
        super().__init__(Incident)

    def get_by_id(self, db: Session, incident_id: str) -> Optional[Incident]:
        return db.query(Incident).filter(Incident.in_id == incident_id).first()

    def get_by_organization(
        self,
        db: Session,
        organization_id: str,
        status: str = None,
        skip: int = 0,
        limit: int = 50
    ) -> List[Incident]:
        """Newest incidents first"""
        query = db.query(Incident).filter(Incident.in_organization_id == organization_id)
        if status:
            query = query.filter(Incident.in_status == status)
        return query.order_by(Incident.in_created_at.desc()).offset(skip).limit(limit).all()
