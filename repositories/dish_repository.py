"""
Dish Repository - Data access layer for dishes and their tag links
"""

from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session, selectinload

from repositories.base import BaseRepository
from domain.models import Dish, MealHistory, Tag, dish_tags, row_to_dict


class DishRepository(BaseRepository[Dish]):
    """Repository for dish data access"""

    def __init__(self, db: Session):
        super().__init__(db, Dish)

    def get_owned(self, dish_id: UUID, user_id: UUID) -> Optional[Dish]:
        """Get a dish with its tags and history if owned by the user"""
        return (
            self.db.query(Dish)
            .options(selectinload(Dish.tags), selectinload(Dish.meal_history))
            .filter(Dish.id == dish_id, Dish.user_id == user_id)
            .populate_existing()
            .first()
        )

    def find_by_name(self, user_id: UUID, name: str) -> Optional[Dish]:
        """Case-insensitive lookup by name"""
        return (
            self.db.query(Dish)
            .filter(Dish.user_id == user_id, func.lower(Dish.name) == name.lower())
            .first()
        )

    def list_with_tags(self, user_id: UUID) -> List[Dish]:
        return (
            self.db.query(Dish)
            .options(selectinload(Dish.tags))
            .filter(Dish.user_id == user_id)
            .order_by(Dish.id)
            .all()
        )

    def summaries(
        self,
        user_id: UUID,
        source_id: Optional[UUID] = None,
        tag_id: Optional[UUID] = None,
        dish_ids: Optional[Iterable[UUID]] = None,
        after_id: Optional[UUID] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Dish rows with their cooking statistics and tag names.

        Each row carries the ``dishes`` columns plus ``tags``,
        ``times_cooked``, ``last_made`` and ``last_comment``. Rows are ordered
        by id so ``after_id``/``limit`` give keyset pagination.
        """
        stats = (
            select(
                MealHistory.dishid.label("dishid"),
                func.count(MealHistory.id).label("times_cooked"),
                func.max(MealHistory.date).label("last_made"),
            )
            .where(MealHistory.user_id == user_id)
            .group_by(MealHistory.dishid)
            .subquery()
        )

        query = (
            self.db.query(Dish, stats.c.times_cooked, stats.c.last_made)
            .outerjoin(stats, stats.c.dishid == Dish.id)
            .options(selectinload(Dish.tags))
            .filter(Dish.user_id == user_id)
            .populate_existing()
        )
        if source_id is not None:
            query = query.filter(Dish.source_id == source_id)
        if tag_id is not None:
            query = query.filter(Dish.tags.any(Tag.id == tag_id))
        if dish_ids is not None:
            query = query.filter(Dish.id.in_(list(dish_ids)))
        if after_id is not None:
            query = query.filter(Dish.id > after_id)
        query = query.order_by(Dish.id)
        if limit is not None:
            query = query.limit(limit)

        results = query.all()
        last_comments = self._last_comments([dish.id for dish, _, _ in results])

        summaries = []
        for dish, times_cooked, last_made in results:
            row = row_to_dict(dish)
            row["tags"] = [tag.name for tag in dish.tags]
            row["times_cooked"] = times_cooked or 0
            row["last_made"] = last_made
            row["last_comment"] = last_comments.get(dish.id)
            summaries.append(row)
        return summaries

    def _last_comments(self, dish_ids: List[UUID]) -> Dict[UUID, str]:
        """Most recent non-blank note per dish"""
        if not dish_ids:
            return {}
        rows = (
            self.db.query(MealHistory.dishid, MealHistory.notes)
            .filter(
                MealHistory.dishid.in_(dish_ids),
                MealHistory.notes.isnot(None),
                MealHistory.notes != "",
            )
            .order_by(MealHistory.date.desc())
            .all()
        )
        comments: Dict[UUID, str] = {}
        for dish_id, notes in rows:
            if dish_id not in comments and notes.strip():
                comments[dish_id] = notes
        return comments

    def set_tags(self, dish: Dish, tags: List[Tag]) -> Dish:
        dish.tags = tags
        return self.update(dish)

    def unlink_source(self, source_id: UUID) -> int:
        """Clear ``source_id`` on every dish pointing at the source (no commit)"""
        return (
            self.db.query(Dish)
            .filter(Dish.source_id == source_id)
            .update({Dish.source_id: None}, synchronize_session="evaluate")
        )

    def reassign_source(self, from_source_id: UUID, to_source_id: UUID) -> int:
        """Point dishes at a different source (no commit)"""
        return (
            self.db.query(Dish)
            .filter(Dish.source_id == from_source_id)
            .update({Dish.source_id: to_source_id}, synchronize_session="evaluate")
        )

    def delete_tag_links_for_user(self, user_id: UUID) -> int:
        """Remove dish/tag links for every dish the user owns (no commit)"""
        result = self.db.execute(
            delete(dish_tags).where(
                dish_tags.c.dish_id.in_(
                    select(Dish.id).where(Dish.user_id == user_id)
                )
            )
        )
        return result.rowcount or 0
