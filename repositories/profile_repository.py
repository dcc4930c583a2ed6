"""
Profile Repository - Data access layer for user profiles
"""

from uuid import UUID

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import Profile


class ProfileRepository(BaseRepository[Profile]):
    """Repository for profile data access (the profile id is the user id)"""

    def __init__(self, db: Session):
        super().__init__(db, Profile)

    def get_or_create(self, user_id: UUID) -> Profile:
        """Get the user's profile, creating an empty one on first access"""
        profile = self.get_by_id(user_id)
        if profile is None:
            profile = self.create(Profile(id=user_id, cuisines=[]))
        return profile
