"""Recipe source routes"""

from typing import List
from uuid import UUID
import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from api.dependencies import get_current_user_id
from domain.models import get_db_session
from domain.schemas import (
    Dish,
    Source,
    SourceCreate,
    SourceMergeRequest,
    SourceMergeResult,
    SourceUpdate,
)
from services.source_service import SourceService

router = APIRouter(prefix="/sources", tags=["Sources"])
logger = logging.getLogger("mealtracker.api.sources")


@router.get("", response_model=List[Source])
def list_sources(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    return SourceService.list_sources(db, user_id)


@router.post("", response_model=Source, status_code=status.HTTP_201_CREATED)
def create_source(
    payload: SourceCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    return SourceService.create_source(db, user_id, payload)


@router.get("/{source_id}", response_model=Source)
def get_source(
    source_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    return SourceService.get_source(db, user_id, source_id)


@router.patch("/{source_id}", response_model=Source)
def update_source(
    source_id: UUID,
    payload: SourceUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    return SourceService.update_source(db, user_id, source_id, payload)


@router.delete("/{source_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_source(
    source_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """Delete a source; its dishes are kept without a source"""
    SourceService.delete_source(db, user_id, source_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{source_id}/dishes", response_model=List[Dish])
def list_source_dishes(
    source_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    return SourceService.list_dishes(db, user_id, source_id)


@router.post("/{source_id}/merge", response_model=SourceMergeResult)
def merge_source(
    source_id: UUID,
    payload: SourceMergeRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """Move every dish of this source to the target source, then delete this one"""
    return SourceService.merge_sources(db, user_id, source_id, payload.target_source_id)
