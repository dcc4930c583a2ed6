"""Statistics and suggestion routes"""

from typing import List, Optional
from uuid import UUID
import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.dependencies import get_current_user_id
from domain.models import get_db_session
from domain.schemas import Dish, StatsData, SuggestionCategory
from services.stats_service import StatsService
from services.suggestion_service import SuggestionService

router = APIRouter(tags=["Stats"])
logger = logging.getLogger("mealtracker.api.stats")


@router.get("/stats", response_model=StatsData)
def get_stats(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    return StatsService.get_stats(db, user_id)


@router.get("/suggestions", response_model=List[SuggestionCategory])
def get_suggestions(
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """Random picks from each suggestion category"""
    return SuggestionService.get_suggestions(db, user_id)


@router.get("/suggestions/weekly-menu", response_model=List[Dish])
def get_weekly_menu(
    count: Optional[int] = Query(None, ge=1, le=50),
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """Weighted random menu favouring dishes that have not been cooked lately"""
    return SuggestionService.get_weekly_menu(db, user_id, count)


@router.get("/suggestions/{category_id}", response_model=SuggestionCategory)
def refresh_suggestion_category(
    category_id: str,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """New random picks for one category"""
    return SuggestionService.refresh_category(db, user_id, category_id)
