"""
Profile Repository - Display-name lookups in the user directory
"""
from typing import Optional
from sqlalchemy.orm import Session

from atams.db import BaseRepository
from app.models.profile import Profile


class ProfileRepository(BaseRepository[Profile]):
    def __init__(self):
        super().__init__(Profile)

    def get_display_name(self, db: Session, user_id: Optional[int]) -> Optional[str]:
        """Full name, falling back to email; None when the user is unknown"""
        if user_id is None:
            return None
        profile = db.query(Profile).filter(Profile.pr_user_id == user_id).first()
        if not profile:
            return None
        return profile.pr_full_name or profile.pr_email
