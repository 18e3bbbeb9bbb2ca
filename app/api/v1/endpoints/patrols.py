"""
Patrols Endpoints - Patrol rounds and checkpoint scans
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.patrol_service import PatrolService
from app.schemas import (
    Patrol,
    PatrolDetail,
    PatrolLog,
    PatrolStartRequest,
    PatrolEndRequest,
    ScanRequest,
    QrScanRequest,
    DataResponse,
    PaginationResponse
)
from app.api.deps import require_auth, require_min_role_level
from app.core.config import settings
from atams.encryption import encrypt_response_data

router = APIRouter()
patrol_service = PatrolService()


@router.post(
    "/",
    response_model=DataResponse[Patrol],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_min_role_level(1))]
)
async def start_patrol(
    request: PatrolStartRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Start a patrol round at a site

    **Errors:**
    - 404: Site not found in the organization
    - 409: A patrol is already in progress for this guard
    """
    user_id = current_user["user_id"]

    patrol = patrol_service.start_patrol(
        db,
        request.pa_organization_id,
        request.pa_site_id,
        user_id,
        notes=request.pa_notes
    )

    return DataResponse(
        success=True,
        message="Patrol started",
        data=patrol
    )


@router.get(
    "/me/active",
    response_model=DataResponse[Patrol],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(1))]
)
async def get_my_active_patrol(
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Current guard's patrol in progress

    **Response:**
    - data is null when no patrol is in progress
    """
    user_id = current_user["user_id"]

    patrol = patrol_service.get_active_patrol(db, user_id)

    response = DataResponse(
        success=True,
        message="Active patrol retrieved successfully",
        data=patrol
    )

    return encrypt_response_data(response, settings)


@router.get(
    "/",
    response_model=PaginationResponse[Patrol],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def list_patrols(
    organization_id: str = Query(..., description="Organization ID"),
    status_filter: Optional[str] = Query(None, alias="status", description="started, completed or incomplete"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(50, ge=1, le=100, description="Maximum records to return"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Patrols of an organization, newest first

    **Authorization:**
    - Requires role level >= 50 (Supervisor or above)
    """
    patrols = patrol_service.list_patrols(db, organization_id, status=status_filter, skip=skip, limit=limit)

    response = PaginationResponse(
        success=True,
        message="Patrols retrieved successfully",
        data=patrols,
        total=len(patrols),
        page=skip // limit + 1,
        size=limit,
        pages=1
    )

    return encrypt_response_data(response, settings)


@router.get(
    "/{pa_id}",
    response_model=DataResponse[PatrolDetail],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(1))]
)
async def get_patrol(
    pa_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Patrol detail with scan timeline and checkpoint progress

    **Response:**
    - logs: ordered by scan time ascending
    - progress: distinct scanned checkpoints out of the site's active checkpoints
    """
    patrol = patrol_service.get_patrol(db, pa_id)

    response = DataResponse(
        success=True,
        message="Patrol retrieved successfully",
        data=patrol
    )

    return encrypt_response_data(response, settings)


@router.post(
    "/{pa_id}/scans",
    response_model=DataResponse[PatrolLog],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_min_role_level(1))]
)
async def record_scan(
    pa_id: str,
    request: ScanRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Append a checkpoint scan to the patrol

    **Errors:**
    - 400: Scan time before the patrol start or the previous scan
    - 403: Patrol belongs to another guard
    - 404: Patrol or checkpoint not found
    - 409: Patrol already closed
    """
    user_id = current_user["user_id"]

    log = patrol_service.record_scan(
        db,
        request.pa_organization_id,
        pa_id,
        request.checkpoint_id,
        status=request.status,
        location=request.location,
        scanned_at=request.scanned_at,
        user_id=user_id
    )

    return DataResponse(
        success=True,
        message="Checkpoint scanned",
        data=log
    )


@router.post(
    "/{pa_id}/qr-scans",
    response_model=DataResponse[PatrolLog],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_min_role_level(1))]
)
async def record_qr_scan(
    pa_id: str,
    request: QrScanRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Record a scan from a checkpoint's QR code

    **Errors:**
    - 403: Patrol belongs to another guard
    - 404: QR code does not match a checkpoint of the patrol's site
    - 409: Patrol closed, or checkpoint already scanned in this patrol
    """
    user_id = current_user["user_id"]

    log = patrol_service.record_qr_scan(
        db,
        request.pa_organization_id,
        pa_id,
        request.qr_code,
        status=request.status,
        location=request.location,
        user_id=user_id
    )

    return DataResponse(
        success=True,
        message="Checkpoint scanned",
        data=log
    )


@router.post(
    "/{pa_id}/end",
    response_model=DataResponse[Patrol],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(1))]
)
async def end_patrol(
    pa_id: str,
    request: PatrolEndRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Close the patrol as completed or incomplete

    **Authorization:**
    - Guards close their own patrols; role level >= 50 may close any patrol of the organization

    **Errors:**
    - 403: Patrol belongs to another guard
    - 404: Patrol not found in the organization
    - 409: Patrol already closed
    """
    user_id = None if current_user.get("role_level", 0) >= 50 else current_user["user_id"]

    patrol = patrol_service.end_patrol(
        db,
        request.pa_organization_id,
        pa_id,
        outcome=request.outcome,
        user_id=user_id
    )

    return DataResponse(
        success=True,
        message=f"Patrol {patrol.pa_status}",
        data=patrol
    )
