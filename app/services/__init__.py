from .site_service import SiteService
from .checkpoint_service import CheckpointService
from .geofence_service import GeofenceService
from .geofence_monitor import GeofenceMonitor
from .patrol_service import PatrolService
from .incident_service import IncidentService
from .notification_service import NotificationService
from .attendance_service import AttendanceService

__all__ = [
    "SiteService",
    "CheckpointService",
    "GeofenceService",
    "GeofenceMonitor",
    "PatrolService",
    "IncidentService",
    "NotificationService",
    "AttendanceService"
]
