"""
Category-based dish suggestions.

Categories:
- Reliable Favorites: cooked 5+ times, last made within 60 days
- Blast from the Past: cooked 3+ times, last made 60+ days ago
- Give It Another Shot: cooked 1-2 times, last made 30+ days ago
- Cuisine You're Missing: dishes from cuisines not cooked in 14+ days

The weekly menu is a separate weighted pick: rarely cooked, long unmade and
old favourite dishes weigh more, and the menu is drawn at random from the
heaviest part of the collection.
"""

from datetime import datetime, timedelta
import logging
import math
import random
from typing import Callable, Dict, List, Optional, Sequence, TypeVar
from uuid import UUID

from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import NotFoundError
from domain.dates import days_since, ensure_aware, utcnow
from domain.enums import SuggestionCategoryId
from domain.mappers import map_array_from_db
from domain.schemas import Dish, SuggestionCategory
from repositories import DishRepository

logger = logging.getLogger("mealtracker.suggestions")

T = TypeVar("T")

RELIABLE_FAVORITES_MIN_COOKED = 5
RELIABLE_FAVORITES_MAX_DAYS = 60
BLAST_FROM_PAST_MIN_COOKED = 3
BLAST_FROM_PAST_MIN_DAYS = 60
GIVE_IT_ANOTHER_SHOT_MIN_COOKED = 1
GIVE_IT_ANOTHER_SHOT_MAX_COOKED = 2
GIVE_IT_ANOTHER_SHOT_MIN_DAYS = 30
CUISINE_MISSING_MIN_DAYS = 14

UNCOOKED_WEIGHT = 5.0
NEVER_MADE_WEIGHT = 5.0
MAX_RECENCY_WEIGHT = 10.0
OLD_FAVORITE_MIN_COOKED = 3
OLD_FAVORITE_MIN_DAYS = 90
OLD_FAVORITE_BONUS = 5.0
WEEKLY_MENU_POOL_SHARE = 0.6


def pick_random(
    items: Sequence[T], count: int, rng: Optional[random.Random] = None
) -> List[T]:
    """Up to ``count`` items in random order (all of them when there are fewer)"""
    if len(items) <= count:
        return list(items)
    return (rng or random).sample(list(items), count)


def reliable_favorites(dishes: Sequence[Dish], now: Optional[datetime] = None) -> List[Dish]:
    return [
        dish
        for dish in dishes
        if dish.times_cooked >= RELIABLE_FAVORITES_MIN_COOKED
        and days_since(dish.last_made, now) <= RELIABLE_FAVORITES_MAX_DAYS
    ]


def blast_from_past(dishes: Sequence[Dish], now: Optional[datetime] = None) -> List[Dish]:
    return [
        dish
        for dish in dishes
        if dish.times_cooked >= BLAST_FROM_PAST_MIN_COOKED
        and days_since(dish.last_made, now) >= BLAST_FROM_PAST_MIN_DAYS
    ]


def give_it_another_shot(
    dishes: Sequence[Dish], now: Optional[datetime] = None
) -> List[Dish]:
    return [
        dish
        for dish in dishes
        if GIVE_IT_ANOTHER_SHOT_MIN_COOKED
        <= dish.times_cooked
        <= GIVE_IT_ANOTHER_SHOT_MAX_COOKED
        and days_since(dish.last_made, now) >= GIVE_IT_ANOTHER_SHOT_MIN_DAYS
    ]


def cuisine_youre_missing(
    dishes: Sequence[Dish], now: Optional[datetime] = None
) -> List[Dish]:
    """Dishes having at least one cuisine that nobody cooked for 14+ days"""
    cuisine_last_cooked: Dict[str, float] = {}
    for dish in dishes:
        days = days_since(dish.last_made, now)
        for cuisine in dish.cuisines:
            if cuisine not in cuisine_last_cooked or days < cuisine_last_cooked[cuisine]:
                cuisine_last_cooked[cuisine] = days

    missing = {
        cuisine
        for cuisine, days in cuisine_last_cooked.items()
        if days >= CUISINE_MISSING_MIN_DAYS
    }
    return [dish for dish in dishes if any(c in missing for c in dish.cuisines)]


_CATEGORIES: Dict[SuggestionCategoryId, Dict[str, object]] = {
    SuggestionCategoryId.RELIABLE_FAVORITES: {
        "title": "Reliable Favorites",
        "description": "Dishes you know and love",
        "empty_message": "Cook your favorites more to see them here!",
        "select": reliable_favorites,
    },
    SuggestionCategoryId.BLAST_FROM_PAST: {
        "title": "Blast from the Past",
        "description": "Old favorites you haven't made in a while",
        "empty_message": "Your favorites will appear here once they're due for a comeback",
        "select": blast_from_past,
    },
    SuggestionCategoryId.GIVE_IT_ANOTHER_SHOT: {
        "title": "Give It Another Shot",
        "description": "Tried once or twice, worth revisiting?",
        "empty_message": "Dishes you've only tried once will appear here",
        "select": give_it_another_shot,
    },
    SuggestionCategoryId.CUISINE_YOURE_MISSING: {
        "title": "Cuisine You're Missing",
        "description": "Shake up your routine with something different",
        "empty_message": "You're cooking a good variety!",
        "select": cuisine_youre_missing,
    },
}


def categorize(
    dishes: Sequence[Dish],
    category_id: SuggestionCategoryId,
    count: int,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> SuggestionCategory:
    meta = _CATEGORIES[category_id]
    select: Callable[..., List[Dish]] = meta["select"]  # type: ignore[assignment]
    return SuggestionCategory(
        id=category_id.value,
        title=meta["title"],
        description=meta["description"],
        dishes=pick_random(select(dishes, now), count, rng),
        empty_message=meta["empty_message"],
    )


def menu_weight(dish: Dish, now: Optional[datetime] = None) -> float:
    """
    Weight of a dish for the weekly menu.

    Sum of a frequency weight (5 when never cooked, else 10 / (times + 1)),
    a recency weight (5 when never made, else weeks since last made, between
    1/7 and 10) and a bonus of 5 for dishes cooked more than 3 times and
    last made over 90 days ago.
    """
    now = now or utcnow()
    if dish.times_cooked == 0:
        frequency = UNCOOKED_WEIGHT
    else:
        frequency = 10 / (dish.times_cooked + 1)

    if dish.last_made is None:
        return frequency + NEVER_MADE_WEIGHT

    recency = min(MAX_RECENCY_WEIGHT, max(1.0, days_since(dish.last_made, now)) / 7)
    bonus = 0.0
    if dish.times_cooked > OLD_FAVORITE_MIN_COOKED and now - ensure_aware(
        dish.last_made
    ) > timedelta(days=OLD_FAVORITE_MIN_DAYS):
        bonus = OLD_FAVORITE_BONUS
    return frequency + recency + bonus


def weekly_menu(
    dishes: Sequence[Dish],
    count: int,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> List[Dish]:
    """``count`` distinct dishes drawn at random from the heaviest ones"""
    if len(dishes) <= count:
        return list(dishes)

    now = now or utcnow()
    weighted = sorted(dishes, key=lambda dish: menu_weight(dish, now), reverse=True)
    pool_size = max(count * 2, math.floor(len(dishes) * WEEKLY_MENU_POOL_SHARE))
    return pick_random(weighted[:pool_size], count, rng)


class SuggestionService:
    """Dish suggestions grouped by category"""

    @staticmethod
    def get_suggestions(
        db: Session,
        user_id: UUID,
        count: Optional[int] = None,
        rng: Optional[random.Random] = None,
        now: Optional[datetime] = None,
    ) -> List[SuggestionCategory]:
        dishes = SuggestionService._dishes(db, user_id)
        count = count or settings.suggestions_per_category
        now = now or utcnow()
        return [categorize(dishes, cid, count, rng, now) for cid in _CATEGORIES]

    @staticmethod
    def refresh_category(
        db: Session,
        user_id: UUID,
        category_id: str,
        count: Optional[int] = None,
        rng: Optional[random.Random] = None,
        now: Optional[datetime] = None,
    ) -> SuggestionCategory:
        """New random picks for a single category"""
        try:
            category = SuggestionCategoryId(category_id)
        except ValueError:
            raise NotFoundError(f"Unknown suggestion category: {category_id}")

        dishes = SuggestionService._dishes(db, user_id)
        logger.info(f"suggestions_refreshed user_id={user_id} category={category.value}")
        return categorize(
            dishes,
            category,
            count or settings.suggestions_per_category,
            rng,
            now or utcnow(),
        )

    @staticmethod
    def get_weekly_menu(
        db: Session,
        user_id: UUID,
        count: Optional[int] = None,
        rng: Optional[random.Random] = None,
        now: Optional[datetime] = None,
    ) -> List[Dish]:
        """A week of dishes weighted towards neglected ones"""
        dishes = SuggestionService._dishes(db, user_id)
        menu = weekly_menu(dishes, count or settings.weekly_menu_size, rng, now)
        logger.info(f"weekly_menu_generated user_id={user_id} dishes={len(menu)}")
        return menu

    @staticmethod
    def _dishes(db: Session, user_id: UUID) -> List[Dish]:
        dishes = map_array_from_db.dish_summaries(DishRepository(db).summaries(user_id))
        return sorted(dishes, key=lambda d: d.name.lower())
