"""
Checkpoint Repository - Data access layer for patrol checkpoints
"""
from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy import func

from atams.db import BaseRepository
from app.models.checkpoint import Checkpoint


class CheckpointRepository(BaseRepository[Checkpoint]):
    def __init__(self):
        super().__init__(Checkpoint)

    def get_by_id(self, db: Session, checkpoint_id: str) -> Optional[Checkpoint]:
        return db.query(Checkpoint).filter(Checkpoint.cp_id == checkpoint_id).first()

    def get_by_qr_code(self, db: Session, qr_code: str) -> Optional[Checkpoint]:
        return db.query(Checkpoint).filter(Checkpoint.cp_qr_code == qr_code).first()

    def get_by_site(self, db: Session, site_id: str, active_only: bool = False) -> List[Checkpoint]:
        """Checkpoints of a site in patrol order"""
        query = db.query(Checkpoint).filter(Checkpoint.cp_site_id == site_id)
        if active_only:
            query = query.filter(Checkpoint.cp_is_active.is_(True))
        return query.order_by(Checkpoint.cp_order.asc(), Checkpoint.cp_name.asc()).all()

    def get_next_order(self, db: Session, site_id: str) -> int:
        """Next position at the end of the site's sequence"""
        current_max = db.query(func.max(Checkpoint.cp_order)).filter(
            Checkpoint.cp_site_id == site_id
        ).scalar()
        return 0 if current_max is None else current_max + 1
