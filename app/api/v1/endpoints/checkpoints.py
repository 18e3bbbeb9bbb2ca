"""
Checkpoints Endpoints - QR checkpoints of a site
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.checkpoint_service import CheckpointService
from app.schemas import Checkpoint, CheckpointCreate, CheckpointUpdate, DataResponse
from app.api.deps import require_auth, require_min_role_level
from app.core.config import settings
from atams.encryption import encrypt_response_data

router = APIRouter()
checkpoint_service = CheckpointService()


@router.get(
    "/sites/{si_id}/checkpoints",
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(1))]
)
async def list_checkpoints(
    si_id: str,
    active_only: bool = Query(False, description="Only checkpoints that are part of the patrol route"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """Checkpoints of a site in patrol order"""
    checkpoints = checkpoint_service.list_checkpoints(db, si_id, active_only=active_only)

    response = DataResponse(
        success=True,
        message="Checkpoints retrieved successfully",
        data=checkpoints
    )

    return encrypt_response_data(response, settings)


@router.post(
    "/sites/{si_id}/checkpoints",
    response_model=DataResponse[Checkpoint],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_min_role_level(50))]
)
async def create_checkpoint(
    si_id: str,
    checkpoint: CheckpointCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Create a checkpoint for a site

    **Errors:**
    - 404: Site not found
    - 409: QR code already assigned
    """
    new_checkpoint = checkpoint_service.create_checkpoint(db, si_id, checkpoint)

    return DataResponse(
        success=True,
        message="Checkpoint created successfully",
        data=new_checkpoint
    )


@router.get(
    "/checkpoints/{cp_id}",
    response_model=DataResponse[Checkpoint],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(1))]
)
async def get_checkpoint(
    cp_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    checkpoint = checkpoint_service.get_checkpoint(db, cp_id)

    response = DataResponse(
        success=True,
        message="Checkpoint retrieved successfully",
        data=checkpoint
    )

    return encrypt_response_data(response, settings)


@router.put(
    "/checkpoints/{cp_id}",
    response_model=DataResponse[Checkpoint],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def update_checkpoint(
    cp_id: str,
    checkpoint: CheckpointUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    updated = checkpoint_service.update_checkpoint(db, cp_id, checkpoint)

    return DataResponse(
        success=True,
        message="Checkpoint updated successfully",
        data=updated
    )


@router.delete(
    "/checkpoints/{cp_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_min_role_level(50))]
)
async def delete_checkpoint(
    cp_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Delete checkpoint

    **Note:**
    - Deletion will fail if the checkpoint appears in a patrol log; deactivate it instead
    """
    checkpoint_service.delete_checkpoint(db, cp_id)

    # 204 returns no content
    return None
