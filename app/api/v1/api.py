from fastapi import APIRouter
from app.api.v1.endpoints import (
    sites,
    checkpoints,
    patrols,
    incidents,
    attendance,
    notifications,
    maintenance
)

api_router = APIRouter()

# Register routes
api_router.include_router(sites.router, prefix="/sites", tags=["Sites"])
api_router.include_router(checkpoints.router, tags=["Checkpoints"])
api_router.include_router(patrols.router, prefix="/patrols", tags=["Patrols"])
api_router.include_router(incidents.router, prefix="/incidents", tags=["Incidents"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
api_router.include_router(maintenance.router, prefix="/maintenance", tags=["Maintenance"])
