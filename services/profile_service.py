from uuid import UUID
import logging

from sqlalchemy.orm import Session

from domain.mappers import map_profile_from_db, map_profile_to_db
from domain.models import row_to_dict
from domain.schemas import Profile, ProfileUpdate
from domain.validation import validate_profile
from repositories import ProfileRepository

logger = logging.getLogger("mealtracker.profile")


class ProfileService:
    """Business logic for profile management"""

    @staticmethod
    def get_profile(db: Session, user_id: UUID) -> Profile:
        """Return the user's profile, creating it on first access"""
        profile = ProfileRepository(db).get_or_create(user_id)
        logger.info(f"profile_fetched user_id={user_id}")
        return map_profile_from_db(profile)

    @staticmethod
    def update_profile(db: Session, user_id: UUID, data: ProfileUpdate) -> Profile:
        """Update username, avatar and preferred cuisines; omitted fields are kept"""
        repo = ProfileRepository(db)
        profile = repo.get_or_create(user_id)

        changes = data.model_dump(exclude_unset=True)
        row = {**row_to_dict(profile), **changes, "id": user_id}
        row = map_profile_to_db(row)
        row.pop("updated_at")
        validate_profile(row)

        for column, value in row.items():
            setattr(profile, column, value)
        repo.update(profile)

        logger.info(
            f"profile_updated user_id={user_id} fields={sorted(changes)}"
        )
        return map_profile_from_db(profile)
