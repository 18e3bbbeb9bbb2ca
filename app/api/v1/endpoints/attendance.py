"""
Attendance Endpoints - Time clock, analytics and anomaly detection
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.attendance_service import AttendanceService
from app.schemas import (
    TimeEntry,
    ClockInRequest,
    ClockOutRequest,
    AttendanceAnalytics,
    Anomaly,
    DataResponse
)
from app.api.deps import require_auth, require_min_role_level
from app.core.config import settings
from atams.encryption import encrypt_response_data

router = APIRouter()
attendance_service = AttendanceService()


@router.post(
    "/clock-in",
    response_model=DataResponse[TimeEntry],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_min_role_level(1))]
)
async def clock_in(
    request: ClockInRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Clock in at the nearest site

    **Process:**
    1. Reject if a shift is already open
    2. Find the organization's nearest site
    3. Geofence validation (if enabled)
    4. Open the time entry

    **Errors:**
    - 403: Outside geofence
    - 404: No sites configured
    - 409: Already clocked in
    """
    user_id = current_user["user_id"]

    entry = attendance_service.clock_in(db, user_id, request)

    return DataResponse(
        success=True,
        message="Clocked in successfully",
        data=entry
    )


@router.post(
    "/clock-out",
    response_model=DataResponse[TimeEntry],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(1))]
)
async def clock_out(
    request: ClockOutRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Close the current shift; duration is fixed in whole minutes

    **Errors:**
    - 404: No open shift
    """
    user_id = current_user["user_id"]

    entry = attendance_service.clock_out(db, request.te_organization_id, user_id)

    return DataResponse(
        success=True,
        message="Clocked out successfully",
        data=entry
    )


@router.get(
    "/me/current",
    response_model=DataResponse[TimeEntry],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(1))]
)
async def get_my_current_entry(
    organization_id: str = Query(..., description="Organization ID"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Current user's open shift

    **Response:**
    - data is null when not clocked in
    """
    user_id = current_user["user_id"]

    entry = attendance_service.get_current_entry(db, organization_id, user_id)

    response = DataResponse(
        success=True,
        message="Current shift retrieved successfully",
        data=entry
    )

    return encrypt_response_data(response, settings)


@router.get(
    "/analytics",
    response_model=DataResponse[AttendanceAnalytics],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def get_attendance_analytics(
    organization_id: str = Query(..., description="Organization ID"),
    days_back: Optional[int] = Query(None, ge=1, le=365, description="Trailing window in days (default: ATTENDANCE_WINDOW_DAYS)"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Entries of the trailing window and dashboard rollups

    **Stats:**
    - avg_hours_per_day: over days with at least one entry
    - late_arrivals_list: more than 5 minutes after work start, worst 20
    - early_departures: clock-out before work end
    - missing_clock_out, daily_hours, top_workers (5)
    """
    analytics = attendance_service.get_attendance_analytics(db, organization_id, days_back=days_back)

    response = DataResponse(
        success=True,
        message="Attendance analytics retrieved successfully",
        data=analytics
    )

    return encrypt_response_data(response, settings)


@router.get(
    "/anomalies",
    response_model=DataResponse[List[Anomaly]],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def get_anomalies(
    organization_id: str = Query(..., description="Organization ID"),
    days_back: Optional[int] = Query(None, ge=1, le=365, description="Trailing window in days (default: ATTENDANCE_WINDOW_DAYS)"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Anomalies over the trailing window, newest first

    Computed on request; nothing is stored.
    """
    anomalies = attendance_service.detect_anomalies(db, organization_id, days_back=days_back)

    response = DataResponse(
        success=True,
        message="Anomalies retrieved successfully",
        data=anomalies
    )

    return encrypt_response_data(response, settings)
