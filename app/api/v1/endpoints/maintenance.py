"""
Maintenance Endpoints - Scheduled housekeeping operations
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.patrol_service import PatrolService
from app.schemas import DataResponse, SweepResult
from app.api.deps import require_min_role_level

router = APIRouter()
patrol_service = PatrolService()


@router.post(
    "/sweep-patrols",
    response_model=DataResponse[SweepResult],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def sweep_abandoned_patrols(
    older_than_hours: Optional[int] = Query(None, ge=1, le=168, description="Patrols started longer ago than this are abandoned (default: PATROL_ABANDON_AFTER_HOURS)"),
    db: Session = Depends(get_db)
):
    """
    Mark abandoned patrols as incomplete

    **Authorization:**
    - Requires role level >= 50 (Supervisor or above)

    **Use case:**
    - Guards who never close a patrol leave it 'started'
    - Should be run periodically via scheduled job
    """
    result = patrol_service.sweep_abandoned_patrols(db, older_than_hours=older_than_hours)

    return DataResponse(
        success=True,
        message="Patrol sweep completed",
        data=result
    )
