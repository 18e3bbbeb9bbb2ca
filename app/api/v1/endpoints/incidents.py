"""
Incidents Endpoints - Guard reports and supervisor status changes
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.incident_service import IncidentService
from app.schemas import (
    Incident,
    IncidentCreate,
    IncidentStatusUpdate,
    DataResponse,
    PaginationResponse
)
from app.api.deps import require_auth, require_min_role_level
from app.core.config import settings
from atams.encryption import encrypt_response_data

router = APIRouter()
incident_service = IncidentService()


@router.post(
    "/",
    response_model=DataResponse[Incident],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_min_role_level(1))]
)
async def report_incident(
    request: IncidentCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """Report an incident; it starts as open"""
    user_id = current_user["user_id"]

    incident = incident_service.create_incident(db, user_id, request)

    return DataResponse(
        success=True,
        message="Incident reported",
        data=incident
    )


@router.get(
    "/",
    response_model=PaginationResponse[Incident],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def list_incidents(
    organization_id: str = Query(..., description="Organization ID"),
    status_filter: Optional[str] = Query(None, alias="status", description="open, investigating, resolved or closed"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(50, ge=1, le=100, description="Maximum records to return"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """Incidents of an organization, newest first"""
    incidents = incident_service.list_incidents(db, organization_id, status=status_filter, skip=skip, limit=limit)

    response = PaginationResponse(
        success=True,
        message="Incidents retrieved successfully",
        data=incidents,
        total=len(incidents),
        page=skip // limit + 1,
        size=limit,
        pages=1
    )

    return encrypt_response_data(response, settings)


@router.get(
    "/{in_id}",
    response_model=DataResponse[Incident],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(1))]
)
async def get_incident(
    in_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    incident = incident_service.get_incident(db, in_id)

    response = DataResponse(
        success=True,
        message="Incident retrieved successfully",
        data=incident
    )

    return encrypt_response_data(response, settings)


@router.patch(
    "/{in_id}/status",
    response_model=DataResponse[Incident],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def update_incident_status(
    in_id: str,
    request: IncidentStatusUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Move an incident to another status

    **Note:**
    - Any status may follow any other, including reopening a closed incident

    **Errors:**
    - 404: Incident not found in the organization
    """
    incident = incident_service.update_status(db, request.in_organization_id, in_id, request.status)

    return DataResponse(
        success=True,
        message="Incident status updated",
        data=incident
    )
