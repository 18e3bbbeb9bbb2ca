"""
Notifications Endpoints - Current user's notifications
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.notification_service import NotificationService
from app.schemas import Notification, NotificationCreate, DataResponse
from app.api.deps import require_auth, require_min_role_level
from app.core.config import settings
from atams.encryption import encrypt_response_data

router = APIRouter()
notification_service = NotificationService()


@router.get(
    "/me",
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(1))]
)
async def list_my_notifications(
    organization_id: str = Query(..., description="Organization ID"),
    unread_only: bool = Query(False, description="Only unread notifications"),
    limit: int = Query(20, ge=1, le=100, description="Maximum records to return"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """Current user's notifications, newest first"""
    user_id = current_user["user_id"]

    notifications = notification_service.list_for_user(
        db, organization_id, user_id, unread_only=unread_only, limit=limit
    )

    response = DataResponse(
        success=True,
        message="Notifications retrieved successfully",
        data=notifications
    )

    return encrypt_response_data(response, settings)


@router.post(
    "/",
    response_model=DataResponse[Notification],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_min_role_level(50))]
)
async def create_notification(
    request: NotificationCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    notification = notification_service.create_notification(db, request)

    return DataResponse(
        success=True,
        message="Notification created",
        data=notification
    )


@router.post(
    "/{nt_id}/read",
    response_model=DataResponse[Notification],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(1))]
)
async def mark_notification_read(
    nt_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Mark a notification as read

    **Errors:**
    - 403: Notification belongs to another user
    - 404: Notification not found
    """
    user_id = current_user["user_id"]

    notification = notification_service.mark_read(db, nt_id, user_id)

    return DataResponse(
        success=True,
        message="Notification marked as read",
        data=notification
    )
