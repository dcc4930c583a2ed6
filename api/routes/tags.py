"""Tag routes"""

from typing import List, Optional
from uuid import UUID
import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from api.dependencies import get_current_user_id
from domain.enums import TagCategory
from domain.models import get_db_session
from domain.schemas import (
    CuisineMigrationResult,
    CuisineMigrationStatus,
    Tag,
    TagCreate,
    TagUpdate,
)
from services.tag_service import TagService

router = APIRouter(prefix="/tags", tags=["Tags"])
logger = logging.getLogger("mealtracker.api.tags")


@router.get("", response_model=List[Tag])
def list_tags(
    category: Optional[TagCategory] = Query(None),
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    return TagService.list_tags(db, user_id, category)


@router.post("", response_model=Tag, status_code=status.HTTP_201_CREATED)
def create_tag(
    payload: TagCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """Create a tag; names are unique per user regardless of case"""
    return TagService.create_tag(db, user_id, payload)


@router.get("/cuisine-migration", response_model=CuisineMigrationStatus)
def cuisine_migration_status(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    return TagService.cuisine_migration_status(db, user_id)


@router.post("/cuisine-migration", response_model=CuisineMigrationResult)
def migrate_cuisines_to_tags(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """Create cuisine tags from dish cuisines and link the dishes to them"""
    return TagService.migrate_cuisines_to_tags(db, user_id)


@router.patch("/{tag_id}", response_model=Tag)
def update_tag(
    tag_id: UUID,
    payload: TagUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    return TagService.update_tag(db, user_id, tag_id, payload)


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tag(
    tag_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    TagService.delete_tag(db, user_id, tag_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
