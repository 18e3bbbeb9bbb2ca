"""
Notification Repository - Data access layer for notifications
"""
from typing import Optional, List
from sqlalchemy.orm import Session

from atams.db import BaseRepository
from app.models.notification import Notification


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self):
        super().__init__(Notification)

    def get_by_id(self, db: Session, notification_id: str) -> Optional[Notification]:
        return db.query(Notification).filter(Notification.nt_id == notification_id).first()

    def get_for_user(
        self,
        db: Session,
        organization_id: str,
        user_id: int,
        unread_only: bool = False,
        limit: int = 20
    ) -> List[Notification]:
        query = db.query(Notification).filter(
            Notification.nt_organization_id == organization_id,
            Notification.nt_user_id == user_id
        )
        if unread_only:
            query = query.filter(Notification.nt_is_read.is_(False))
        return query.order_by(Notification.nt_created_at.desc()).limit(limit).all()
