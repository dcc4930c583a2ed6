"""Profile routes"""

from uuid import UUID
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.dependencies import get_current_user_id
from domain.models import get_db_session
from domain.schemas import Profile, ProfileUpdate
from services.profile_service import ProfileService

router = APIRouter(prefix="/profile", tags=["Profile"])
logger = logging.getLogger("mealtracker.api.profile")


@router.get("", response_model=Profile)
def get_profile(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """Get the caller's profile, creating an empty one on first access"""
    return ProfileService.get_profile(db, user_id)


@router.put("", response_model=Profile)
def update_profile(
    payload: ProfileUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    return ProfileService.update_profile(db, user_id, payload)
