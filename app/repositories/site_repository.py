"""
Site Repository - Data access layer for sites
"""
from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy import func

from atams.db import BaseRepository
from app.models.site import Site


class SiteRepository(BaseRepository[Site]):
    def __init__(self):
        super().__init__(Site)

    def get_by_id(self, db: Session, site_id: str) -> Optional[Site]:
        """Get site by ID using ORM"""
        return db.query(Site).filter(Site.si_id == site_id).first()

    def get_in_organization(self, db: Session, organization_id: str, site_id: str) -> Optional[Site]:
        """Get site by ID only if it belongs to the organization"""
        return db.query(Site).filter(
            Site.si_id == site_id,
            Site.si_organization_id == organization_id
        ).first()

    def get_by_organization(self, db: Session, organization_id: str) -> List[Site]:
        """All sites of an organization ordered by name"""
        return db.query(Site).filter(
            Site.si_organization_id == organization_id
        ).order_by(Site.si_name.asc()).all()

    def get_sites_with_search(
        self,
        db: Session,
        organization_id: str,
        search: str = "",
        skip: int = 0,
        limit: int = 100
    ) -> List[Site]:
        """Get sites with optional search filter using ORM"""
        query = db.query(Site).filter(Site.si_organization_id == organization_id)

        if search:
            query = query.filter(Site.si_name.ilike(f"%{search}%"))

        return query.order_by(Site.si_name.asc()).offset(skip).limit(limit).all()

    def count_sites_with_search(self, db: Session, organization_id: str, search: str = "") -> int:
        """Count sites with optional search filter"""
        query = db.query(func.count(Site.si_id)).filter(Site.si_organization_id == organization_id)
        if search:
            query = query.filter(Site.si_name.ilike(f"%{search}%"))
        return query.scalar() or 0

    def delete_by_id(self, db: Session, site_id: str) -> bool:
        """Delete site by ID and return success status"""
        site = self.get_by_id(db, site_id)
        if site:
            db.delete(site)
            db.commit()
            return True
        return False
