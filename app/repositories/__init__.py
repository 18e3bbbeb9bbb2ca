from .site_repository import SiteRepository
from .checkpoint_repository import CheckpointRepository
from .patrol_repository import PatrolRepository
from .patrol_log_repository import PatrolLogRepository
from .incident_repository import IncidentRepository
from .time_entry_repository import TimeEntryRepository
from .notification_repository import NotificationRepository
from .profile_repository import ProfileRepository

__all__ = [
    "SiteRepository",
    "CheckpointRepository",
    "PatrolRepository",
    "PatrolLogRepository",
    "IncidentRepository",
    "TimeEntryRepository",
    "NotificationRepository",
    "ProfileRepository"
]
