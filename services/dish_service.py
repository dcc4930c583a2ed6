from functools import cmp_to_key
from typing import Iterable, List, Optional
from uuid import UUID
import logging
import uuid

from sqlalchemy.orm import Session

from domain.constants import DEFAULT_CUISINE
from domain.dates import parse_datetime
from domain.enums import DishSortKey
from domain.mappers import map_array_from_db, map_dish_from_db, map_dish_to_db
from domain.models import Dish as DishModel, row_to_dict
from domain.schemas import Dish, DishCreate, DishUpdate
from domain.validation import validate_dish
from repositories import DishRepository, SourceRepository, TagRepository
from app.exceptions import NotFoundError, ServiceValidationError

logger = logging.getLogger("mealtracker.dishes")

ASCENDING_PREFIX = "asc_"


def filter_dishes(
    dishes: Iterable[Dish],
    search: Optional[str] = None,
    cuisines: Optional[List[str]] = None,
    source_id: Optional[UUID] = None,
) -> List[Dish]:
    """
    Keep dishes matching every given filter.

    ``search`` is a case-insensitive substring of the name or of any cuisine;
    ``cuisines`` matches when the dish has at least one of them.
    """
    result = []
    for dish in dishes:
        if search:
            needle = search.lower()
            if needle not in dish.name.lower() and not any(
                needle in cuisine.lower() for cuisine in dish.cuisines
            ):
                continue
        if cuisines and not any(c in cuisines for c in dish.cuisines):
            continue
        if source_id and dish.source_id != source_id:
            continue
        result.append(dish)
    return result


def _compare(a, b) -> int:
    return (a > b) - (a < b)


def _timestamp(dish: Dish) -> float:
    return parse_datetime(dish.last_made).timestamp()


def sort_dishes(dishes: Iterable[Dish], sort_by: Optional[str]) -> List[Dish]:
    """
    Sort dishes by one of the DishSortKey values.

    The default direction is A-Z for names and cuisines, most recent / most
    frequent first otherwise. An ``asc_`` prefix inverts it. Dishes that were
    never cooked stay last when sorting by last cooked, in either direction.
    Unknown keys leave the order unchanged.
    """
    dishes = list(dishes)
    if not sort_by:
        return dishes

    ascending = sort_by.startswith(ASCENDING_PREFIX)
    key = sort_by[len(ASCENDING_PREFIX):] if ascending else sort_by
    direction = -1 if ascending else 1

    def by_name(a: Dish, b: Dish) -> int:
        return direction * _compare(a.name.lower(), b.name.lower())

    def by_last_cooked(a: Dish, b: Dish) -> int:
        if not a.last_made and not b.last_made:
            return 0
        if not a.last_made:
            return 1
        if not b.last_made:
            return -1
        return direction * _compare(_timestamp(b), _timestamp(a))

    def by_times_cooked(a: Dish, b: Dish) -> int:
        return direction * _compare(b.times_cooked or 0, a.times_cooked or 0)

    def by_cuisine(a: Dish, b: Dish) -> int:
        first_a = a.cuisines[0].lower() if a.cuisines else ""
        first_b = b.cuisines[0].lower() if b.cuisines else ""
        return direction * _compare(first_a, first_b)

    def by_last_comment(a: Dish, b: Dish) -> int:
        # commented dishes first, then most recently cooked
        if a.last_comment and not b.last_comment:
            result = -1
        elif not a.last_comment and b.last_comment:
            result = 1
        elif a.last_comment and b.last_comment:
            if not a.last_made and not b.last_made:
                result = _compare(a.last_comment, b.last_comment)
            elif a.last_made and b.last_made:
                result = _compare(_timestamp(b), _timestamp(a))
            else:
                result = -1 if a.last_made else 1
        else:
            result = 0
        return direction * result

    comparators = {
        DishSortKey.NAME.value: by_name,
        DishSortKey.LAST_COOKED.value: by_last_cooked,
        DishSortKey.TIMES_COOKED.value: by_times_cooked,
        DishSortKey.CUISINE.value: by_cuisine,
        DishSortKey.LAST_COMMENT.value: by_last_comment,
    }
    comparator = comparators.get(key)
    if comparator is None:
        logger.debug(f"unknown_sort_key sort_by={sort_by}")
        return dishes
    return sorted(dishes, key=cmp_to_key(comparator))


class DishService:
    """Business logic for dishes"""

    @staticmethod
    def list_dishes(
        db: Session,
        user_id: UUID,
        search: Optional[str] = None,
        cuisines: Optional[List[str]] = None,
        source_id: Optional[UUID] = None,
        tag_id: Optional[UUID] = None,
        sort_by: Optional[str] = None,
    ) -> List[Dish]:
        """List the user's dishes with cooking statistics, filtered and sorted"""
        rows = DishRepository(db).summaries(user_id, source_id=source_id, tag_id=tag_id)
        dishes = map_array_from_db.dish_summaries(rows)
        dishes = sorted(dishes, key=lambda d: d.name.lower())
        dishes = filter_dishes(dishes, search=search, cuisines=cuisines)
        return sort_dishes(dishes, sort_by)

    @staticmethod
    def get_dish(db: Session, user_id: UUID, dish_id: UUID) -> Dish:
        """Get a single dish with statistics computed from its history"""
        dish = DishService._get_owned(db, user_id, dish_id)
        return map_dish_from_db(
            dish, dish.meal_history, tags=[tag.name for tag in dish.tags]
        )

    @staticmethod
    def create_dish(db: Session, user_id: UUID, data: DishCreate) -> Dish:
        DishService._check_source(db, user_id, data.source_id)

        payload = data.model_dump(exclude={"tag_ids"})
        payload["cuisines"] = payload.get("cuisines") or [DEFAULT_CUISINE]
        payload["user_id"] = user_id
        payload["id"] = uuid.uuid4()
        row = map_dish_to_db(payload)
        validate_dish(map_dish_from_db(row))

        dish = DishModel(**row)
        if data.tag_ids:
            dish.tags = DishService._owned_tags(db, user_id, data.tag_ids)

        dish = DishRepository(db).create(dish)
        logger.info(f"dish_created dish_id={dish.id} user_id={user_id}")
        return DishService.get_dish(db, user_id, dish.id)

    @staticmethod
    def update_dish(
        db: Session, user_id: UUID, dish_id: UUID, data: DishUpdate
    ) -> Dish:
        repo = DishRepository(db)
        dish = DishService._get_owned(db, user_id, dish_id)

        changes = data.model_dump(exclude_unset=True)
        if "source_id" in changes:
            DishService._check_source(db, user_id, changes["source_id"])
        if "cuisines" in changes and not changes["cuisines"]:
            changes["cuisines"] = [DEFAULT_CUISINE]
        if "name" in changes and not changes["name"]:
            raise ServiceValidationError("Dish name cannot be empty")

        row = {**row_to_dict(dish), **map_dish_to_db({**changes, "id": dish_id})}
        # stored cuisines may predate the known list (imports)
        validate_dish(
            map_dish_from_db(row), allow_unknown_cuisines="cuisines" not in changes
        )
        for column, value in row.items():
            setattr(dish, column, value)

        repo.update(dish)
        logger.info(
            f"dish_updated dish_id={dish_id} user_id={user_id} fields={sorted(changes)}"
        )
        return DishService.get_dish(db, user_id, dish_id)

    @staticmethod
    def delete_dish(db: Session, user_id: UUID, dish_id: UUID) -> None:
        """Delete a dish together with its meal history and tag links"""
        dish = DishService._get_owned(db, user_id, dish_id)
        db.delete(dish)
        db.commit()
        logger.info(f"dish_deleted dish_id={dish_id} user_id={user_id}")

    @staticmethod
    def set_tags(
        db: Session, user_id: UUID, dish_id: UUID, tag_ids: List[UUID]
    ) -> Dish:
        """Replace every tag on the dish"""
        dish = DishService._get_owned(db, user_id, dish_id)
        tags = DishService._owned_tags(db, user_id, tag_ids)
        DishRepository(db).set_tags(dish, tags)
        logger.info(f"dish_tags_set dish_id={dish_id} tag_count={len(tags)}")
        return DishService.get_dish(db, user_id, dish_id)

    @staticmethod
    def add_tag(db: Session, user_id: UUID, dish_id: UUID, tag_id: UUID) -> Dish:
        dish = DishService._get_owned(db, user_id, dish_id)
        tag = DishService._owned_tags(db, user_id, [tag_id])[0]
        if tag not in dish.tags:
            DishRepository(db).set_tags(dish, [*dish.tags, tag])
        return DishService.get_dish(db, user_id, dish_id)

    @staticmethod
    def remove_tag(db: Session, user_id: UUID, dish_id: UUID, tag_id: UUID) -> Dish:
        dish = DishService._get_owned(db, user_id, dish_id)
        remaining = [tag for tag in dish.tags if tag.id != tag_id]
        if len(remaining) == len(dish.tags):
            raise NotFoundError(f"Tag {tag_id} is not attached to dish {dish_id}")
        DishRepository(db).set_tags(dish, remaining)
        return DishService.get_dish(db, user_id, dish_id)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _get_owned(db: Session, user_id: UUID, dish_id: UUID) -> DishModel:
        dish = DishRepository(db).get_owned(dish_id, user_id)
        if not dish:
            raise NotFoundError(f"Dish {dish_id} not found")
        return dish

    @staticmethod
    def _check_source(db: Session, user_id: UUID, source_id: Optional[UUID]) -> None:
        if source_id and not SourceRepository(db).get_owned(source_id, user_id):
            raise NotFoundError(f"Source {source_id} not found")

    @staticmethod
    def _owned_tags(db: Session, user_id: UUID, tag_ids: List[UUID]):
        unique_ids = list(dict.fromkeys(tag_ids))
        tags = TagRepository(db).get_many_owned(unique_ids, user_id)
        if len(tags) != len(unique_ids):
            missing = set(unique_ids) - {tag.id for tag in tags}
            raise NotFoundError(
                f"Tag(s) not found: {', '.join(sorted(str(t) for t in missing))}"
            )
        return tags
