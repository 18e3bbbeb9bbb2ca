"""
Site Service - Business logic for site management
"""
from typing import List
from sqlalchemy.orm import Session

from app.repositories.site_repository import SiteRepository
from app.services.geofence_service import GeofenceService
from app.schemas.site import SiteCreate, SiteUpdate, Site, GeofenceCheckResponse
from app.core.config import settings
from atams.exceptions import NotFoundException


class SiteService:
    def __init__(self) -> None:
        self.repo = SiteRepository()
        self.geofence = GeofenceService()

    def list_sites(
        self,
        db: Session,
        organization_id: str,
        search: str = "",
        skip: int = 0,
        limit: int = 100
    ) -> List[Site]:
        sites = self.repo.get_sites_with_search(db, organization_id, search=search, skip=skip, limit=limit)
        return [Site.model_validate(s) for s in sites]

    def count_sites(self, db: Session, organization_id: str, search: str = "") -> int:
        return self.repo.count_sites_with_search(db, organization_id, search=search)

    def get_site(self, db: Session, si_id: str) -> Site:
        site = self.repo.get_by_id(db, si_id)
        if not site:
            raise NotFoundException("Site not found")
        return Site.model_validate(site)

    def create_site(self, db: Session, payload: SiteCreate) -> Site:
        obj = self.repo.create(db, {
            "si_organization_id": payload.si_organization_id,
            "si_name": payload.si_name,
            "si_latitude": payload.si_latitude,
            "si_longitude": payload.si_longitude,
            "si_radius_m": payload.si_radius_m or settings.DEFAULT_GEOFENCE_RADIUS_M,
        })
        return Site.model_validate(obj)

    def update_site(self, db: Session, si_id: str, payload: SiteUpdate) -> Site:
        obj = self.repo.get_by_id(db, si_id)
        if not obj:
            raise NotFoundException("Site not found")
        update_data = payload.model_dump(exclude_unset=True, exclude_none=True)
        obj = self.repo.update(db, obj, update_data)
        return Site.model_validate(obj)

    def delete_site(self, db: Session, si_id: str) -> None:
        # rely on FK constraints to prevent deletion if referenced
        deleted = self.repo.delete_by_id(db, si_id)
        if not deleted:
            raise NotFoundException("Site not found")
        return None

    def check_position(self, db: Session, si_id: str, latitude: float, longitude: float) -> GeofenceCheckResponse:
        """Report how far a position is from a site and whether it is inside the geofence"""
        site = self.repo.get_by_id(db, si_id)
        if not site:
            raise NotFoundException("Site not found")

        distance = self.geofence.distance_to_site(site, latitude, longitude)
        return GeofenceCheckResponse(
            si_id=site.si_id,
            distance_m=round(distance, 2),
            radius_m=site.si_radius_m,
            inside=distance <= site.si_radius_m
        )
