"""
Incident Service - Guard-reported incidents and supervisor status changes

Statuses are open, investigating, resolved and closed. Supervisors may move an
incident between any two of them, including reopening a closed incident; the
only checks are that the status is known and that updated_at moves with it.
"""
from typing import Callable, List
from datetime import datetime
from sqlalchemy.orm import Session

from app.models.incident import Incident as IncidentModel
from app.repositories.incident_repository import IncidentRepository
from app.repositories.patrol_repository import PatrolRepository
from app.repositories.site_repository import SiteRepository
from app.repositories.profile_repository import ProfileRepository
from app.schemas.incident import Incident, IncidentCreate, INCIDENT_STATUSES
from atams.exceptions import NotFoundException, BadRequestException
from atams.logging import get_logger

logger = get_logger(__name__)


class IncidentService:
    def __init__(self, clock: Callable[[], datetime] = datetime.utcnow) -> None:
        self.clock = clock
        self.repo = IncidentRepository()
        self.patrol_repo = PatrolRepository()
        self.site_repo = SiteRepository()
        self.profile_repo = ProfileRepository()

    def _to_schema(self, db: Session, incident: IncidentModel) -> Incident:
        result = Incident.model_validate(incident)
        result.reporter_name = self.profile_repo.get_display_name(db, incident.in_user_id)

        if incident.in_patrol_id:
            patrol = self.patrol_repo.get_by_id(db, incident.in_patrol_id)
            if patrol:
                site = self.site_repo.get_by_id(db, patrol.pa_site_id)
                result.site_id = patrol.pa_site_id
                result.site_name = site.si_name if site else None
        return result

    def create_incident(self, db: Session, user_id: int, payload: IncidentCreate) -> Incident:
        """
        Record an incident reported by a guard, always starting as open

        Raises:
            NotFoundException: If the referenced patrol is not in the organization
        """
        if payload.in_patrol_id:
            patrol = self.patrol_repo.get_by_id(db, payload.in_patrol_id)
            if not patrol or patrol.pa_organization_id != payload.in_organization_id:
                raise NotFoundException("Patrol not found")

        now = self.clock()
        incident = self.repo.create(db, {
            "in_organization_id": payload.in_organization_id,
            "in_patrol_id": payload.in_patrol_id,
            "in_user_id": user_id,
            "in_title": payload.in_title,
            "in_description": payload.in_description,
            "in_priority": payload.in_priority,
            "in_status": "open",
            "in_photos": list(payload.in_photos),
            "in_location": payload.in_location,
            "in_created_at": now,
            "in_updated_at": now
        })
        logger.info("Incident %s reported (%s priority)", incident.in_id, incident.in_priority)
        return self._to_schema(db, incident)

    def update_status(self, db: Session, organization_id: str, incident_id: str, status: str) -> Incident:
        """
        Move an incident of the organization to any of the four statuses

        Raises:
            BadRequestException: Unknown status
            NotFoundException: If incident not found in the organization
        """
        if status not in INCIDENT_STATUSES:
            raise BadRequestException(f"Invalid incident status: {status}")

        incident = self.repo.get_by_id(db, incident_id)
        if not incident or incident.in_organization_id != organization_id:
            raise NotFoundException("Incident not found")

        previous = incident.in_status
        incident = self.repo.update(db, incident, {
            "in_status": status,
            "in_updated_at": self.clock()
        })
        logger.info("Incident %s status %s -> %s", incident.in_id, previous, status)
        return self._to_schema(db, incident)

    def get_incident(self, db: Session, incident_id: str) -> Incident:
        incident = self.repo.get_by_id(db, incident_id)
        if not incident:
            raise NotFoundException("Incident not found")
        return self._to_schema(db, incident)

    def list_incidents(
        self,
        db: Session,
        organization_id: str,
        status: str = None,
        skip: int = 0,
        limit: int = 50
    ) -> List[Incident]:
        incidents = self.repo.get_by_organization(db, organization_id, status=status, skip=skip, limit=limit)
        return [self._to_schema(db, i) for i in incidents]
