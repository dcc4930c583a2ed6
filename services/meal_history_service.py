from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID
import logging
import uuid

from sqlalchemy.orm import Session

from app.error_handling import RetryConfig, classify_error, log_error, retry_operation
from app.exceptions import NotFoundError
from domain.dates import day_bounds, ensure_aware
from domain.mappers import (
    map_array_from_db,
    map_meal_history_from_db,
    map_meal_history_to_db,
)
from domain.models import MealHistory as MealHistoryModel, row_to_dict
from domain.schemas import (
    Dish,
    MealHistory,
    MealHistoryCreate,
    MealHistoryUpdate,
    MealHistoryWithDish,
)
from domain.validation import validate_meal_history
from repositories import DishRepository, MealHistoryRepository

logger = logging.getLogger("mealtracker.meal_history")


class MealHistoryService:
    """Business logic for recording and browsing cooked dishes"""

    @staticmethod
    def record_cooked(
        db: Session,
        user_id: UUID,
        data: MealHistoryCreate,
        retry_config: Optional[RetryConfig] = None,
    ) -> MealHistory:
        """
        Record that a dish was cooked.

        The dish must belong to the user and the date cannot be in the future.
        Transient database failures are retried with exponential backoff.
        """
        if not DishRepository(db).get_owned(data.dish_id, user_id):
            raise NotFoundError(f"Dish {data.dish_id} not found")

        row = map_meal_history_to_db(
            {
                "id": uuid.uuid4(),
                "dish_id": data.dish_id,
                "date": ensure_aware(data.date),
                "notes": data.notes or None,
                "user_id": user_id,
            }
        )
        validate_meal_history(map_meal_history_from_db(row))

        def insert() -> MealHistoryModel:
            try:
                return MealHistoryRepository(db).create(MealHistoryModel(**row))
            except Exception as exc:
                db.rollback()
                log_error(classify_error(exc), "record_cooked")
                raise

        entry = retry_operation(insert, retry_config)
        logger.info(
            f"meal_recorded entry_id={entry.id} dish_id={data.dish_id} user_id={user_id}"
        )
        return map_meal_history_from_db(entry)

    @staticmethod
    def list_history(
        db: Session,
        user_id: UUID,
        dish_id: Optional[UUID] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[MealHistoryWithDish]:
        """History newest first, each entry with its dish"""
        # stored dates are UTC wall-clock time on backends without offsets
        start = ensure_aware(start) if start else None
        end = ensure_aware(end) if end else None
        entries = MealHistoryRepository(db).list_for_user(
            user_id, dish_id=dish_id, start=start, end=end, limit=limit
        )
        return MealHistoryService.with_dishes(db, user_id, entries)

    @staticmethod
    def list_for_day(db: Session, user_id: UUID, day: date) -> List[MealHistoryWithDish]:
        start, end = day_bounds(day)
        return MealHistoryService.list_history(db, user_id, start=start, end=end)

    @staticmethod
    def update_entry(
        db: Session, user_id: UUID, entry_id: UUID, data: MealHistoryUpdate
    ) -> MealHistory:
        repo = MealHistoryRepository(db)
        entry = repo.get_owned(entry_id, user_id)
        if not entry:
            raise NotFoundError(f"Meal history entry {entry_id} not found")

        changes = data.model_dump(exclude_unset=True)
        if "date" in changes and changes["date"] is None:
            changes.pop("date")
        elif "date" in changes:
            changes["date"] = ensure_aware(changes["date"])
        if "notes" in changes:
            changes["notes"] = changes["notes"] or None

        row = {**row_to_dict(entry), **map_meal_history_to_db({**changes, "id": entry_id})}
        validate_meal_history(map_meal_history_from_db(row))
        for column, value in row.items():
            setattr(entry, column, value)

        repo.update(entry)
        logger.info(f"meal_history_updated entry_id={entry_id} user_id={user_id}")
        return map_meal_history_from_db(entry)

    @staticmethod
    def delete_entry(db: Session, user_id: UUID, entry_id: UUID) -> None:
        repo = MealHistoryRepository(db)
        entry = repo.get_owned(entry_id, user_id)
        if not entry:
            raise NotFoundError(f"Meal history entry {entry_id} not found")
        repo.delete(entry_id)
        logger.info(f"meal_history_deleted entry_id={entry_id} user_id={user_id}")

    @staticmethod
    def with_dishes(
        db: Session, user_id: UUID, entries: List[MealHistoryModel]
    ) -> List[MealHistoryWithDish]:
        """Attach the (summarized) dish to each history entry"""
        dish_ids = {entry.dishid for entry in entries}
        dishes: Dict[UUID, Dish] = {}
        if dish_ids:
            rows = DishRepository(db).summaries(user_id, dish_ids=dish_ids)
            dishes = {dish.id: dish for dish in map_array_from_db.dish_summaries(rows)}

        return [
            MealHistoryWithDish(
                **history.model_dump(), dish=dishes.get(history.dish_id)
            )
            for history in map_array_from_db.meal_history(entries)
        ]
