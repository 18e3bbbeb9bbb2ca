"""
Notification Service - Organization-scoped notification records
"""
import asyncio
from typing import Callable, List
from sqlalchemy.orm import Session

from app.repositories.notification_repository import NotificationRepository
from app.schemas.notification import Notification, NotificationCreate
from atams.exceptions import NotFoundException, ForbiddenException


class NotificationService:
    def __init__(self) -> None:
        self.repo = NotificationRepository()

    def create_notification(self, db: Session, payload: NotificationCreate) -> Notification:
        obj = self.repo.create(db, {**payload.model_dump(), "nt_is_read": False})
        return Notification.model_validate(obj)

    def list_for_user(
        self,
        db: Session,
        organization_id: str,
        user_id: int,
        unread_only: bool = False,
        limit: int = 20
    ) -> List[Notification]:
        rows = self.repo.get_for_user(db, organization_id, user_id, unread_only=unread_only, limit=limit)
        return [Notification.model_validate(n) for n in rows]

    def mark_read(self, db: Session, notification_id: str, user_id: int) -> Notification:
        """
        Mark a notification as read

        Raises:
            NotFoundException: If notification not found
            ForbiddenException: If it belongs to another user
        """
        obj = self.repo.get_by_id(db, notification_id)
        if not obj:
            raise NotFoundException("Notification not found")
        if obj.nt_user_id != user_id:
            raise ForbiddenException("Notification belongs to another user")
        obj = self.repo.update(db, obj, {"nt_is_read": True})
        return Notification.model_validate(obj)


class DatabaseNotificationSink:
    """
    Async notification sink for the geofence monitor.
    Opens its own session per write and runs the blocking insert in a worker thread.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self.session_factory = session_factory
        self.service = NotificationService()

    async def __call__(self, payload: NotificationCreate) -> None:
        await asyncio.to_thread(self._insert, payload)

    def _insert(self, payload: NotificationCreate) -> None:
        db = self.session_factory()
        try:
            self.service.create_notification(db, payload)
        finally:
            db.close()
