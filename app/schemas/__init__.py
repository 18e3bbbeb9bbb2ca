from .site import Site, SiteCreate, SiteUpdate, GeofenceCheckRequest, GeofenceCheckResponse
from .checkpoint import Checkpoint, CheckpointCreate, CheckpointUpdate
from .patrol import (
    Patrol,
    PatrolDetail,
    PatrolLog,
    PatrolStartRequest,
    PatrolEndRequest,
    ScanRequest,
    QrScanRequest,
    ScanLocation,
    SweepResult
)
from .incident import Incident, IncidentCreate, IncidentStatusUpdate
from .attendance import (
    TimeEntry,
    AttendanceEntry,
    AttendanceStats,
    AttendanceAnalytics,
    Anomaly,
    ClockInRequest,
    ClockOutRequest
)
from .notification import Notification, NotificationCreate
from .common import DataResponse, PaginationResponse

__all__ = [
    # Site schemas
    "Site",
    "SiteCreate",
    "SiteUpdate",
    "GeofenceCheckRequest",
    "GeofenceCheckResponse",
    # Checkpoint schemas
    "Checkpoint",
    "CheckpointCreate",
    "CheckpointUpdate",
    # Patrol schemas
    "Patrol",
    "PatrolDetail",
    "PatrolLog",
    "PatrolStartRequest",
    "PatrolEndRequest",
    "ScanRequest",
    "QrScanRequest",
    "ScanLocation",
    "SweepResult",
    # Incident schemas
    "Incident",
    "IncidentCreate",
    "IncidentStatusUpdate",
    # Attendance schemas
    "TimeEntry",
    "AttendanceEntry",
    "AttendanceStats",
    "AttendanceAnalytics",
    "Anomaly",
    "ClockInRequest",
    "ClockOutRequest",
    # Notification schemas
    "Notification",
    "NotificationCreate",
    # Common schemas
    "DataResponse",
    "PaginationResponse"
]
