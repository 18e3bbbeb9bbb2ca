from .site import Site
from .checkpoint import Checkpoint
from .patrol import Patrol
from .patrol_log import PatrolLog
from .incident import Incident
from .time_entry import TimeEntry
from .notification import Notification
from .profile import Profile

__all__ = [
    "Site",
    "Checkpoint",
    "Patrol",
    "PatrolLog",
    "Incident",
    "TimeEntry",
    "Notification",
    "Profile"
]
