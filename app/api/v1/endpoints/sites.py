"""
Sites Endpoints - Site registry and geofence checks
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.services.site_service import SiteService
from app.schemas import (
    Site,
    SiteCreate,
    SiteUpdate,
    GeofenceCheckRequest,
    GeofenceCheckResponse,
    DataResponse,
    PaginationResponse
)
from app.api.deps import require_auth, require_min_role_level
from app.core.config import settings
from atams.encryption import encrypt_response_data

router = APIRouter()
site_service = SiteService()


@router.get(
    "/",
    response_model=PaginationResponse[Site],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(1))]
)
async def list_sites(
    organization_id: str = Query(..., description="Organization owning the sites"),
    search: str = Query("", description="Search sites by name"),
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum records to return"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Get list of sites with pagination and search

    **Authorization:**
    - Requires role level >= 1 (guards pick a site before patrolling)
    """
    sites = site_service.list_sites(db, organization_id, search=search, skip=skip, limit=limit)
    total = site_service.count_sites(db, organization_id, search=search)

    response = PaginationResponse(
        success=True,
        message="Sites retrieved successfully",
        data=sites,
        total=total,
        page=skip // limit + 1,
        size=limit,
        pages=(total + limit - 1) // limit
    )

    return encrypt_response_data(response, settings)


@router.get(
    "/{si_id}",
    response_model=DataResponse[Site],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(1))]
)
async def get_site(
    si_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """Get single site by ID"""
    site = site_service.get_site(db, si_id)

    response = DataResponse(
        success=True,
        message="Site retrieved successfully",
        data=site
    )

    return encrypt_response_data(response, settings)


@router.post(
    "/",
    response_model=DataResponse[Site],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_min_role_level(50))]
)
async def create_site(
    site: SiteCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Create new site

    **Authorization:**
    - Requires role level >= 50 (Supervisor or above)

    **Validation:**
    - si_latitude: -90..90, si_longitude: -180..180
    - si_radius_m: positive, defaults to DEFAULT_GEOFENCE_RADIUS_M
    """
    new_site = site_service.create_site(db, site)

    return DataResponse(
        success=True,
        message="Site created successfully",
        data=new_site
    )


@router.put(
    "/{si_id}",
    response_model=DataResponse[Site],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(50))]
)
async def update_site(
    si_id: str,
    site: SiteUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Update existing site

    **Authorization:**
    - Requires role level >= 50 (Supervisor or above)
    """
    updated_site = site_service.update_site(db, si_id, site)

    return DataResponse(
        success=True,
        message="Site updated successfully",
        data=updated_site
    )


@router.delete(
    "/{si_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_min_role_level(50))]
)
async def delete_site(
    si_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Delete site

    **Note:**
    - Deletion will fail if the site is referenced by checkpoints, patrols or time entries
    """
    site_service.delete_site(db, si_id)

    # 204 returns no content
    return None


@router.post(
    "/{si_id}/geofence-check",
    response_model=DataResponse[GeofenceCheckResponse],
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(require_min_role_level(1))]
)
async def check_geofence(
    si_id: str,
    request: GeofenceCheckRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(require_auth)
):
    """
    Distance from a position to the site centre and whether it lies inside the geofence

    Inside iff distance <= si_radius_m.
    """
    result = site_service.check_position(db, si_id, request.latitude, request.longitude)

    return DataResponse(
        success=True,
        message="Geofence checked",
        data=result
    )
