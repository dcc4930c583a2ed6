from collections import Counter
from typing import Dict, Iterable
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from domain.constants import KNOWN_CUISINES
from domain.mappers import map_array_from_db
from domain.schemas import Dish, MostCooked, RecentlyCooked, StatsData
from repositories import DishRepository, MealHistoryRepository
from services.meal_history_service import MealHistoryService

logger = logging.getLogger("mealtracker.stats")

TOP_DISHES_LIMIT = 5
RECENTLY_COOKED_LIMIT = 5


def cuisine_breakdown(dishes: Iterable[Dish]) -> Dict[str, int]:
    """
    Number of dishes per cuisine.

    A dish's cuisines are its own cuisine list plus any tag named after a
    known cuisine; each dish counts at most once per cuisine.
    """
    counts: Counter = Counter()
    for dish in dishes:
        cuisines = set(dish.cuisines)
        cuisines.update(tag for tag in dish.tags if tag in KNOWN_CUISINES)
        counts.update(cuisines)
    return dict(counts)


class StatsService:
    """Aggregate statistics for the dashboard"""

    @staticmethod
    def get_stats(db: Session, user_id: UUID) -> StatsData:
        dishes = map_array_from_db.dish_summaries(DishRepository(db).summaries(user_id))
        dishes.sort(key=lambda d: d.name.lower())
        by_times_cooked = sorted(dishes, key=lambda d: d.times_cooked, reverse=True)

        most_cooked = None
        if by_times_cooked:
            top = by_times_cooked[0]
            most_cooked = MostCooked(name=top.name, times_cooked=top.times_cooked)

        entries = MealHistoryRepository(db).list_for_user(
            user_id, limit=RECENTLY_COOKED_LIMIT
        )
        recently_cooked = [
            RecentlyCooked(date=entry.date, dish=entry.dish, notes=entry.notes)
            for entry in MealHistoryService.with_dishes(db, user_id, entries)
        ]

        stats = StatsData(
            total_dishes=len(dishes),
            total_times_cooked=sum(d.times_cooked for d in dishes),
            most_cooked=most_cooked,
            top_dishes=[d for d in by_times_cooked if d.times_cooked > 0][
                :TOP_DISHES_LIMIT
            ],
            cuisine_breakdown=cuisine_breakdown(dishes),
            recently_cooked=recently_cooked,
        )
        logger.info(
            f"stats_computed user_id={user_id} dishes={stats.total_dishes} "
            f"times_cooked={stats.total_times_cooked}"
        )
        return stats
