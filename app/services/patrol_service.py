"""
Patrol Service - Patrol lifecycle and the append-only checkpoint scan ledger
"""
from typing import Callable, List, Optional
from datetime import datetime, timedelta
from sqlalchemy.orm import Session

from app.models.patrol import Patrol as PatrolModel
from app.repositories.site_repository import SiteRepository
from app.repositories.checkpoint_repository import CheckpointRepository
from app.repositories.patrol_repository import PatrolRepository
from app.repositories.patrol_log_repository import PatrolLogRepository
from app.repositories.profile_repository import ProfileRepository
from app.schemas.patrol import (
    Patrol,
    PatrolDetail,
    PatrolLog,
    PatrolProgress,
    ScanLocation,
    SweepResult
)
from app.core.config import settings
from app.utils.time import as_naive_utc, minutes_between
from atams.exceptions import (
    NotFoundException,
    BadRequestException,
    ConflictException,
    ForbiddenException
)
from atams.logging import get_logger

logger = get_logger(__name__)

CLOSED_STATUSES = ("completed", "incomplete")
SCAN_STATUSES = ("scanned", "issue_reported")


def patrol_duration_minutes(started_at: datetime, ended_at: Optional[datetime]) -> Optional[int]:
    """Rounded patrol length in minutes, None while the patrol is ongoing"""
    if ended_at is None:
        return None
    return minutes_between(started_at, ended_at)


def format_patrol_duration(started_at: datetime, ended_at: Optional[datetime]) -> str:
    minutes = patrol_duration_minutes(started_at, ended_at)
    if minutes is None:
        return "Ongoing"
    return f"{minutes} mins"


class PatrolService:
    def __init__(self, clock: Callable[[], datetime] = datetime.utcnow) -> None:
        self.clock = clock
        self.site_repo = SiteRepository()
        self.checkpoint_repo = CheckpointRepository()
        self.patrol_repo = PatrolRepository()
        self.log_repo = PatrolLogRepository()
        self.profile_repo = ProfileRepository()

    def _to_schema(self, patrol: PatrolModel) -> Patrol:
        result = Patrol.model_validate(patrol)
        result.duration_minutes = patrol_duration_minutes(patrol.pa_started_at, patrol.pa_ended_at)
        result.duration_label = format_patrol_duration(patrol.pa_started_at, patrol.pa_ended_at)
        return result

    def _get_patrol_or_404(self, db: Session, patrol_id: str) -> PatrolModel:
        patrol = self.patrol_repo.get_by_id(db, patrol_id)
        if not patrol:
            raise NotFoundException("Patrol not found")
        return patrol

    def _get_writable_patrol(
        self,
        db: Session,
        organization_id: str,
        patrol_id: str,
        user_id: Optional[int] = None
    ) -> PatrolModel:
        """
        Patrol of the organization, optionally restricted to the guard walking it

        Raises:
            NotFoundException: Patrol missing or in another organization
            ForbiddenException: Patrol belongs to another guard
        """
        patrol = self.patrol_repo.get_by_id(db, patrol_id)
        if not patrol or patrol.pa_organization_id != organization_id:
            raise NotFoundException("Patrol not found")
        if user_id is not None and patrol.pa_user_id != user_id:
            raise ForbiddenException("Patrol belongs to another guard")
        return patrol

    def start_patrol(
        self,
        db: Session,
        organization_id: str,
        site_id: str,
        user_id: int,
        notes: Optional[str] = None
    ) -> Patrol:
        """
        Start a patrol round for a guard

        Raises:
            NotFoundException: If the site is not part of the organization
            ConflictException: If the guard already has a patrol in progress
        """
        site = self.site_repo.get_in_organization(db, organization_id, site_id)
        if not site:
            raise NotFoundException("Site not found")

        if self.patrol_repo.get_active_for_user(db, user_id):
            raise ConflictException("A patrol is already in progress")

        patrol = self.patrol_repo.create(db, {
            "pa_organization_id": organization_id,
            "pa_site_id": site_id,
            "pa_user_id": user_id,
            "pa_status": "started",
            "pa_started_at": self.clock(),
            "pa_notes": notes
        })
        logger.info("Patrol %s started at site %s by user %s", patrol.pa_id, site_id, user_id)
        return self._to_schema(patrol)

    def record_scan(
        self,
        db: Session,
        organization_id: str,
        patrol_id: str,
        checkpoint_id: str,
        status: str = "scanned",
        location: Optional[ScanLocation] = None,
        scanned_at: Optional[datetime] = None,
        user_id: Optional[int] = None
    ) -> PatrolLog:
        """
        Append a checkpoint scan to a patrol

        An issue_reported scan flags that visit only; the patrol status is untouched.
        A device-supplied scanned_at may not precede the patrol start or the latest scan.

        Raises:
            NotFoundException: Patrol or checkpoint missing, or checkpoint belongs to another site
            ForbiddenException: Patrol belongs to another guard
            ConflictException: Patrol already closed
            BadRequestException: Unknown scan status, or scan time out of order
        """
        if status not in SCAN_STATUSES:
            raise BadRequestException(f"Invalid scan status: {status}")

        patrol = self._get_writable_patrol(db, organization_id, patrol_id, user_id)
        if patrol.pa_status in CLOSED_STATUSES:
            raise ConflictException(f"Patrol is already {patrol.pa_status}")

        checkpoint = self.checkpoint_repo.get_by_id(db, checkpoint_id)
        if not checkpoint or checkpoint.cp_site_id != patrol.pa_site_id:
            raise NotFoundException("Checkpoint not found for this patrol's site")

        scanned_at = as_naive_utc(scanned_at or self.clock())
        if scanned_at < as_naive_utc(patrol.pa_started_at):
            raise BadRequestException("Scan time is before the patrol started")

        latest = self.log_repo.get_latest(db, patrol.pa_id)
        if latest and scanned_at < as_naive_utc(latest.pl_scanned_at):
            raise BadRequestException("Scan time is earlier than the previous scan")

        log = self.log_repo.append(db, {
            "pl_patrol_id": patrol.pa_id,
            "pl_checkpoint_id": checkpoint.cp_id,
            "pl_status": status,
            "pl_scanned_at": scanned_at,
            "pl_location": location.model_dump() if location else None
        })

        result = PatrolLog.model_validate(log)
        result.checkpoint_name = checkpoint.cp_name
        return result

    def record_qr_scan(
        self,
        db: Session,
        organization_id: str,
        patrol_id: str,
        qr_code: str,
        status: str = "scanned",
        location: Optional[ScanLocation] = None,
        user_id: Optional[int] = None
    ) -> PatrolLog:
        """
        Record a scan from the checkpoint's QR token

        Raises:
            NotFoundException: Patrol missing, or QR code does not match a checkpoint of the patrol's site
            ForbiddenException: Patrol belongs to another guard
            ConflictException: Patrol closed, or checkpoint already scanned in this patrol
        """
        patrol = self._get_writable_patrol(db, organization_id, patrol_id, user_id)
        checkpoint = self.checkpoint_repo.get_by_qr_code(db, qr_code)
        if not checkpoint or checkpoint.cp_site_id != patrol.pa_site_id:
            raise NotFoundException("QR code does not match any checkpoint")

        if self.log_repo.has_scanned_checkpoint(db, patrol.pa_id, checkpoint.cp_id):
            raise ConflictException("Checkpoint already scanned in this patrol")

        return self.record_scan(
            db,
            organization_id,
            patrol.pa_id,
            checkpoint.cp_id,
            status=status,
            location=location,
            user_id=user_id
        )

    def end_patrol(
        self,
        db: Session,
        organization_id: str,
        patrol_id: str,
        outcome: str = "completed",
        user_id: Optional[int] = None
    ) -> Patrol:
        """
        Close a patrol

        Args:
            outcome: "completed" for an explicit close-out, "incomplete" when abandoned
            user_id: Acting guard; None lets a supervisor close any patrol of the organization

        Raises:
            NotFoundException: If patrol not found in the organization
            ForbiddenException: Patrol belongs to another guard
            ConflictException: If patrol already closed
            BadRequestException: Unknown outcome
        """
        if outcome not in CLOSED_STATUSES:
            raise BadRequestException(f"Invalid patrol outcome: {outcome}")

        patrol = self._get_writable_patrol(db, organization_id, patrol_id, user_id)
        if patrol.pa_status in CLOSED_STATUSES:
            raise ConflictException(f"Patrol is already {patrol.pa_status}")

        ended_at = max(as_naive_utc(self.clock()), as_naive_utc(patrol.pa_started_at))
        patrol = self.patrol_repo.update(db, patrol, {
            "pa_status": outcome,
            "pa_ended_at": ended_at
        })
        logger.info("Patrol %s ended as %s", patrol.pa_id, outcome)
        return self._to_schema(patrol)

    def get_patrol(self, db: Session, patrol_id: str) -> PatrolDetail:
        """Patrol with site/guard names, scan timeline and checkpoint progress"""
        patrol = self._get_patrol_or_404(db, patrol_id)
        logs = self.log_repo.get_timeline(db, patrol.pa_id)

        checkpoints = self.checkpoint_repo.get_by_site(db, patrol.pa_site_id)
        names = {cp.cp_id: cp.cp_name for cp in checkpoints}
        active_ids = {cp.cp_id for cp in checkpoints if cp.cp_is_active}

        timeline = []
        for log in logs:
            item = PatrolLog.model_validate(log)
            item.checkpoint_name = names.get(log.pl_checkpoint_id)
            timeline.append(item)

        scanned = len({log.pl_checkpoint_id for log in logs if log.pl_checkpoint_id in active_ids})
        total = len(active_ids)

        site = self.site_repo.get_by_id(db, patrol.pa_site_id)
        detail = PatrolDetail(**self._to_schema(patrol).model_dump())
        detail.site_name = site.si_name if site else None
        detail.user_name = self.profile_repo.get_display_name(db, patrol.pa_user_id)
        detail.logs = timeline
        detail.progress = PatrolProgress(
            scanned=scanned,
            total=total,
            ratio=scanned / total if total > 0 else 0.0
        )
        return detail

    def get_active_patrol(self, db: Session, user_id: int) -> Optional[Patrol]:
        patrol = self.patrol_repo.get_active_for_user(db, user_id)
        return self._to_schema(patrol) if patrol else None

    def list_patrols(
        self,
        db: Session,
        organization_id: str,
        status: str = None,
        skip: int = 0,
        limit: int = 50
    ) -> List[Patrol]:
        patrols = self.patrol_repo.get_by_organization(db, organization_id, status=status, skip=skip, limit=limit)
        return [self._to_schema(p) for p in patrols]

    def sweep_abandoned_patrols(self, db: Session, older_than_hours: int = None) -> SweepResult:
        """
        Mark patrols still 'started' past the abandonment window as incomplete

        Args:
            older_than_hours: Abandonment window (default: PATROL_ABANDON_AFTER_HOURS)
        """
        if older_than_hours is None:
            older_than_hours = settings.PATROL_ABANDON_AFTER_HOURS

        now = as_naive_utc(self.clock())
        cutoff = now - timedelta(hours=older_than_hours)
        stale = self.patrol_repo.get_started_before(db, cutoff)

        for patrol in stale:
            self.patrol_repo.update(db, patrol, {
                "pa_status": "incomplete",
                "pa_ended_at": max(now, as_naive_utc(patrol.pa_started_at))
            })

        if stale:
            logger.info("Marked %d abandoned patrol(s) incomplete", len(stale))

        return SweepResult(
            updated_count=len(stale),
            cutoff=cutoff,
            message=f"Marked {len(stale)} patrol(s) started before {cutoff.isoformat()} as incomplete"
        )
