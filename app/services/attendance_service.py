"""
Attendance Service - Time clock and attendance analytics
"""
from typing import Callable, List, Optional, Tuple
from datetime import datetime, timedelta
from sqlalchemy.orm import Session

from app.models.time_entry import TimeEntry as TimeEntryModel
from app.models.profile import Profile
from app.repositories.site_repository import SiteRepository
from app.repositories.time_entry_repository import TimeEntryRepository
from app.services.geofence_service import GeofenceService
from app.services.attendance_aggregator import compute_attendance_stats
from app.services.anomaly_detector import compute_anomalies
from app.schemas.attendance import (
    Anomaly,
    AttendanceAnalytics,
    AttendanceEntry,
    ClockInRequest,
    TimeEntry
)
from app.core.config import settings
from app.utils.time import as_naive_utc, minutes_between
from atams.exceptions import (
    NotFoundException,
    ForbiddenException,
    ConflictException
)
from atams.logging import get_logger

logger = get_logger(__name__)


def to_attendance_entry(row: Tuple[TimeEntryModel, Optional[Profile]]) -> AttendanceEntry:
    """Flatten a (time entry, profile) row; a missing profile leaves the name fields empty"""
    entry, profile = row
    return AttendanceEntry(
        id=entry.te_id,
        user_id=entry.te_user_id,
        clock_in=entry.te_clock_in,
        clock_out=entry.te_clock_out,
        duration_minutes=entry.te_duration_minutes,
        notes=entry.te_notes,
        full_name=getattr(profile, "pr_full_name", None),
        email=getattr(profile, "pr_email", None)
    )


class AttendanceService:
    def __init__(self, clock: Callable[[], datetime] = datetime.utcnow) -> None:
        self.clock = clock
        self.site_repo = SiteRepository()
        self.entry_repo = TimeEntryRepository()
        self.geofence = GeofenceService()

    def _validate_geofence(self, db: Session, organization_id: str, latitude: float, longitude: float) -> Optional[str]:
        """
        Match the position to the organization's nearest site

        Returns:
            Site ID of the nearest site, None when unenforced and no site exists

        Raises:
            NotFoundException: If the organization has no sites
            ForbiddenException: If the position is outside the nearest site's geofence
        """
        nearest = self.geofence.nearest_site(
            self.site_repo.get_by_organization(db, organization_id),
            latitude,
            longitude
        )
        if nearest is None:
            if settings.GEOFENCE_ENFORCED:
                raise NotFoundException("No sites configured for this organization")
            return None

        site, distance = nearest
        if settings.GEOFENCE_ENFORCED and distance > site.si_radius_m:
            raise ForbiddenException(
                f"Out of geofence (distance: {distance:.0f}m, allowed: {site.si_radius_m}m)"
            )
        return site.si_id

    def clock_in(self, db: Session, user_id: int, request: ClockInRequest) -> TimeEntry:
        """
        Open a shift for the user at the nearest site

        Raises:
            ConflictException: User already has an open shift
            NotFoundException: No sites to clock in at
            ForbiddenException: Outside the geofence
        """
        org_id = request.te_organization_id
        if self.entry_repo.get_open_entry(db, org_id, user_id):
            raise ConflictException("Already clocked in")

        site_id = self._validate_geofence(db, org_id, request.latitude, request.longitude)

        entry = self.entry_repo.create(db, {
            "te_organization_id": org_id,
            "te_user_id": user_id,
            "te_site_id": site_id,
            "te_clock_in": self.clock(),
            "te_notes": request.te_notes,
            "te_location": {"lat": request.latitude, "lng": request.longitude}
        })
        logger.info("User %s clocked in at site %s", user_id, site_id)
        return TimeEntry.model_validate(entry)

    def clock_out(self, db: Session, organization_id: str, user_id: int) -> TimeEntry:
        """
        Close the user's open shift and fix its duration

        Raises:
            NotFoundException: No open shift
        """
        entry = self.entry_repo.get_open_entry(db, organization_id, user_id)
        if not entry:
            raise NotFoundException("No open shift to clock out from")

        clock_out = max(as_naive_utc(self.clock()), as_naive_utc(entry.te_clock_in))
        entry = self.entry_repo.update(db, entry, {
            "te_clock_out": clock_out,
            "te_duration_minutes": minutes_between(entry.te_clock_in, clock_out)
        })
        logger.info("User %s clocked out after %s minutes", user_id, entry.te_duration_minutes)
        return TimeEntry.model_validate(entry)

    def get_current_entry(self, db: Session, organization_id: str, user_id: int) -> Optional[TimeEntry]:
        """The user's open shift, if clocked in"""
        entry = self.entry_repo.get_open_entry(db, organization_id, user_id)
        return TimeEntry.model_validate(entry) if entry else None

    def _window(self, days_back: Optional[int]) -> datetime:
        if days_back is None:
            days_back = settings.ATTENDANCE_WINDOW_DAYS
        return as_naive_utc(self.clock()) - timedelta(days=days_back)

    def get_attendance_analytics(
        self,
        db: Session,
        organization_id: str,
        days_back: int = None
    ) -> AttendanceAnalytics:
        """
        Entries of the trailing window (newest first) with dashboard rollups

        Args:
            days_back: Window length (default: ATTENDANCE_WINDOW_DAYS)
        """
        rows = self.entry_repo.get_window_with_profiles(
            db, organization_id, self._window(days_back), ascending=False
        )
        entries = [to_attendance_entry(row) for row in rows]
        return AttendanceAnalytics(entries=entries, stats=compute_attendance_stats(entries))

    def detect_anomalies(
        self,
        db: Session,
        organization_id: str,
        days_back: int = None,
        now: datetime = None
    ) -> List[Anomaly]:
        """
        Run the anomaly rules over the trailing window

        Args:
            days_back: Window length (default: ATTENDANCE_WINDOW_DAYS)
            now: Reference time for the lateness rule (default: service clock)
        """
        rows = self.entry_repo.get_window_with_profiles(
            db, organization_id, self._window(days_back), ascending=True
        )
        entries = [to_attendance_entry(row) for row in rows]
        anomalies = compute_anomalies(entries, now or self.clock())
        logger.info("Detected %d anomalies over %d entries", len(anomalies), len(entries))
        return anomalies
