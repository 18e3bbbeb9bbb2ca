"""
Time Entry Repository - Data access layer for clock-in/clock-out shifts
"""
from typing import Optional, List, Tuple
from datetime import datetime
from sqlalchemy.orm import Session

from atams.db import BaseRepository
from app.models.time_entry import TimeEntry
from app.models.profile import Profile


class TimeEntryRepository(BaseRepository[TimeEntry]):
    def __init__(self):
        super().__init__(TimeEntry)

    def get_open_entry(self, db: Session, organization_id: str, user_id: int) -> Optional[TimeEntry]:
        """The user's shift without a clock-out, if any"""
        return db.query(TimeEntry).filter(
            TimeEntry.te_organization_id == organization_id,
            TimeEntry.te_user_id == user_id,
            TimeEntry.te_clock_out.is_(None)
        ).order_by(TimeEntry.te_clock_in.desc()).first()

    def get_window_with_profiles(
        self,
        db: Session,
        organization_id: str,
        since: datetime,
        ascending: bool = True
    ) -> List[Tuple[TimeEntry, Optional[Profile]]]:
        """
        Entries clocked in since the cutoff, left-joined with the employee profile.
        The profile side is None when the directory has no row for the user.
        """
        order = TimeEntry.te_clock_in.asc() if ascending else TimeEntry.te_clock_in.desc()
        return db.query(TimeEntry, Profile).outerjoin(
            Profile, Profile.pr_user_id == TimeEntry.te_user_id
        ).filter(
            TimeEntry.te_organization_id == organization_id,
            TimeEntry.te_clock_in >= since
        ).order_by(order).all()
