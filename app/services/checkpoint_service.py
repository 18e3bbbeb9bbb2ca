"""
Checkpoint Service - QR checkpoints within a site
"""
from typing import List
from sqlalchemy.orm import Session

from app.repositories.site_repository import SiteRepository
from app.repositories.checkpoint_repository import CheckpointRepository
from app.schemas.checkpoint import Checkpoint, CheckpointCreate, CheckpointUpdate
from atams.exceptions import NotFoundException, ConflictException


class CheckpointService:
    def __init__(self) -> None:
        self.site_repo = SiteRepository()
        self.repo = CheckpointRepository()

    def list_checkpoints(self, db: Session, site_id: str, active_only: bool = False) -> List[Checkpoint]:
        checkpoints = self.repo.get_by_site(db, site_id, active_only=active_only)
        return [Checkpoint.model_validate(c) for c in checkpoints]

    def get_checkpoint(self, db: Session, checkpoint_id: str) -> Checkpoint:
        checkpoint = self.repo.get_by_id(db, checkpoint_id)
        if not checkpoint:
            raise NotFoundException("Checkpoint not found")
        return Checkpoint.model_validate(checkpoint)

    def create_checkpoint(self, db: Session, site_id: str, payload: CheckpointCreate) -> Checkpoint:
        """
        Create a checkpoint at the end of the site's patrol sequence

        Raises:
            NotFoundException: If site not found
            ConflictException: If the QR code is already assigned
        """
        site = self.site_repo.get_by_id(db, site_id)
        if not site:
            raise NotFoundException("Site not found")
        if self.repo.get_by_qr_code(db, payload.cp_qr_code):
            raise ConflictException("QR code is already assigned to a checkpoint")

        order = payload.cp_order
        if order is None:
            order = self.repo.get_next_order(db, site_id)

        obj = self.repo.create(db, {
            "cp_site_id": site.si_id,
            "cp_organization_id": site.si_organization_id,
            "cp_name": payload.cp_name,
            "cp_description": payload.cp_description,
            "cp_qr_code": payload.cp_qr_code,
            "cp_order": order,
            "cp_is_active": True
        })
        return Checkpoint.model_validate(obj)

    def update_checkpoint(self, db: Session, checkpoint_id: str, payload: CheckpointUpdate) -> Checkpoint:
        obj = self.repo.get_by_id(db, checkpoint_id)
        if not obj:
            raise NotFoundException("Checkpoint not found")
        obj = self.repo.update(db, obj, payload.model_dump(exclude_unset=True, exclude_none=True))
        return Checkpoint.model_validate(obj)

    def delete_checkpoint(self, db: Session, checkpoint_id: str) -> None:
        deleted = self.repo.delete(db, checkpoint_id)
        if not deleted:
            raise NotFoundException("Checkpoint not found")
        return None
