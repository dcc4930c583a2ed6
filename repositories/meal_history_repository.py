"""
Meal History Repository - Data access layer for cooking records
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import MealHistory


class MealHistoryRepository(BaseRepository[MealHistory]):
    """Repository for meal history data access"""

    def __init__(self, db: Session):
        super().__init__(db, MealHistory)

    def list_for_user(
        self,
        user_id: UUID,
        dish_id: Optional[UUID] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[MealHistory]:
        """History entries newest first, optionally filtered by dish and date range"""
        query = self.db.query(MealHistory).filter(MealHistory.user_id == user_id)
        if dish_id is not None:
            query = query.filter(MealHistory.dishid == dish_id)
        if start is not None:
            query = query.filter(MealHistory.date >= start)
        if end is not None:
            query = query.filter(MealHistory.date <= end)
        query = query.order_by(MealHistory.date.desc(), MealHistory.id)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def list_for_dish(self, dish_id: UUID) -> List[MealHistory]:
        return (
            self.db.query(MealHistory)
            .filter(MealHistory.dishid == dish_id)
            .order_by(MealHistory.date.desc())
            .all()
        )
