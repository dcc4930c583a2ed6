"""Cooking history routes"""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from api.dependencies import get_current_user_id
from domain.models import get_db_session
from domain.schemas import (
    MealHistory,
    MealHistoryCreate,
    MealHistoryUpdate,
    MealHistoryWithDish,
)
from services.meal_history_service import MealHistoryService

router = APIRouter(prefix="/meal-history", tags=["Meal History"])
logger = logging.getLogger("mealtracker.api.meal_history")


@router.get("", response_model=List[MealHistoryWithDish])
def list_history(
    dish_id: Optional[UUID] = Query(None, alias="dishId"),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    limit: Optional[int] = Query(None, ge=1),
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """Cooking history, newest first"""
    return MealHistoryService.list_history(
        db, user_id, dish_id=dish_id, start=start, end=end, limit=limit
    )


@router.get("/by-date", response_model=List[MealHistoryWithDish])
def list_history_for_day(
    day: date = Query(..., alias="date"),
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """Everything cooked on one calendar day (UTC)"""
    return MealHistoryService.list_for_day(db, user_id, day)


@router.post("", response_model=MealHistory, status_code=status.HTTP_201_CREATED)
def record_cooked(
    payload: MealHistoryCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """Record that a dish was cooked"""
    return MealHistoryService.record_cooked(db, user_id, payload)


@router.patch("/{entry_id}", response_model=MealHistory)
def update_entry(
    entry_id: UUID,
    payload: MealHistoryUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    return MealHistoryService.update_entry(db, user_id, entry_id, payload)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(
    entry_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    MealHistoryService.delete_entry(db, user_id, entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
