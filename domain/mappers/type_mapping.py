"""
Mapping between database rows and application entities.

From the database: row column names -> entity fields, empty values -> None,
derived dish fields computed from cooking history.
To the database: entity fields -> row column names, derived fields dropped.

Row inputs may be plain mappings or ORM instances. Entity inputs may be
pydantic models or mappings keyed by snake_case or camelCase field names.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import BaseModel
from pydantic.alias_generators import to_snake

from domain.constants import LEGACY_BOOK_SOURCE_TYPES
from domain.dates import ensure_aware, parse_datetime
from domain.enums import SourceType, TagCategory
from domain.models.database import row_to_dict
from domain.schemas.entity_schemas import Dish, MealHistory, Profile, Source, Tag
from domain.validation import ValidationError

logger = logging.getLogger("mealtracker.mappers")

_MAPPING_ERRORS = (ValidationError, ValueError, TypeError, KeyError)
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _row(record: Any) -> Dict[str, Any]:
    row = dict(record) if isinstance(record, Mapping) else row_to_dict(record)
    return {
        key: ensure_aware(value) if isinstance(value, datetime) else value
        for key, value in row.items()
    }


def _entity_input(entity: Any) -> Dict[str, Any]:
    if isinstance(entity, BaseModel):
        return entity.model_dump(exclude_unset=True)
    return {to_snake(key): value for key, value in dict(entity).items()}


def _blank_to_none(value: Any) -> Any:
    if value is None or value == "" or value == []:
        return None
    return value


def _enum_value(value: Any) -> Any:
    return getattr(value, "value", value)


def _missing(row: Mapping[str, Any], *keys: str) -> bool:
    return any(not row.get(key) for key in keys)


def _describe(exc: Exception) -> str:
    return exc.message if isinstance(exc, ValidationError) else str(exc)


# ---------------------------------------------------------------------------
# Dishes
# ---------------------------------------------------------------------------


def _history_stats(history: Sequence[Any]) -> Dict[str, Any]:
    """times_cooked / last_made / last_comment from meal history rows."""
    rows = [_row(entry) for entry in history]
    if not rows:
        return {"times_cooked": 0, "last_made": None, "last_comment": None}

    ordered = sorted(
        rows, key=lambda r: parse_datetime(r.get("date")) or _EPOCH, reverse=True
    )
    last_comment = next(
        (r["notes"] for r in ordered if r.get("notes") and r["notes"].strip()),
        None,
    )
    return {
        "times_cooked": len(rows),
        "last_made": ordered[0].get("date"),
        "last_comment": last_comment,
    }


def map_dish_from_db(
    db_dish: Any,
    meal_history: Optional[Sequence[Any]] = None,
    tags: Optional[Iterable[str]] = None,
) -> Dish:
    """Map a ``dishes`` row to a Dish, computing stats from ``meal_history``."""
    try:
        row = _row(db_dish)
        if _missing(row, "id", "name", "user_id"):
            raise ValidationError("Invalid dish record: missing required fields")

        return Dish(
            id=row["id"],
            name=row["name"],
            created_at=row.get("createdat"),
            cuisines=row.get("cuisines") or [],
            source_id=row.get("source_id"),
            location=_blank_to_none(row.get("location")),
            user_id=row["user_id"],
            tags=list(tags or []),
            **_history_stats(meal_history or []),
        )
    except _MAPPING_ERRORS as exc:
        raise ValidationError(
            f"Failed to map dish from database: {_describe(exc)}"
        ) from exc


def map_dish_from_summary(summary: Any) -> Dish:
    """Map a ``dish_summary`` row whose cooking stats are pre-computed."""
    try:
        row = _row(summary)
        if _missing(row, "id", "name", "user_id"):
            raise ValidationError("Invalid dish summary: missing required fields")

        return Dish(
            id=row["id"],
            name=row["name"],
            created_at=row.get("createdat") or None,
            cuisines=row.get("cuisines") or [],
            source_id=row.get("source_id"),
            location=_blank_to_none(row.get("location")),
            user_id=row["user_id"],
            tags=row.get("tags") or [],
            last_made=row.get("last_made"),
            times_cooked=row.get("times_cooked") or 0,
            last_comment=_blank_to_none(row.get("last_comment")),
        )
    except _MAPPING_ERRORS as exc:
        raise ValidationError(
            f"Failed to map dish from summary: {_describe(exc)}"
        ) from exc


def map_dish_to_db(dish: Any) -> Dict[str, Any]:
    """
    Map a (possibly partial) dish to a ``dishes`` row.

    Only the fields present on the input are emitted, so the result can be
    used for inserts and partial updates alike. Derived fields are dropped.
    """
    try:
        data = _entity_input(dish)
        if not data.get("id") and not data.get("name"):
            raise ValidationError("Name is required when creating a new dish")

        columns = {
            "id": "id",
            "name": "name",
            "created_at": "createdat",
            "cuisines": "cuisines",
            "source_id": "source_id",
            "location": "location",
            "user_id": "user_id",
        }
        return {column: data[field] for field, column in columns.items() if field in data}
    except _MAPPING_ERRORS as exc:
        raise ValidationError(
            f"Failed to map dish to database: {_describe(exc)}"
        ) from exc


# ---------------------------------------------------------------------------
# Meal history
# ---------------------------------------------------------------------------


def map_meal_history_from_db(db_history: Any) -> MealHistory:
    try:
        row = _row(db_history)
        if _missing(row, "id", "dishid", "user_id"):
            raise ValidationError(
                "Invalid meal history record: missing required fields"
            )

        return MealHistory(
            id=row["id"],
            dish_id=row["dishid"],
            date=row.get("date"),
            notes=_blank_to_none(row.get("notes")),
            user_id=row["user_id"],
        )
    except _MAPPING_ERRORS as exc:
        raise ValidationError(
            f"Failed to map meal history from database: {_describe(exc)}"
        ) from exc


def map_meal_history_to_db(meal_history: Any) -> Dict[str, Any]:
    try:
        data = _entity_input(meal_history)
        if not data.get("id") and not data.get("dish_id"):
            raise ValidationError(
                "DishId is required when creating a new meal history record"
            )

        columns = {
            "id": "id",
            "dish_id": "dishid",
            "date": "date",
            "notes": "notes",
            "user_id": "user_id",
        }
        return {column: data[field] for field, column in columns.items() if field in data}
    except _MAPPING_ERRORS as exc:
        raise ValidationError(
            f"Failed to map meal history to database: {_describe(exc)}"
        ) from exc


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


def normalize_source_type(value: Any) -> SourceType:
    """Stored type -> SourceType; legacy and unknown values become books."""
    value = _enum_value(value)
    if value == SourceType.WEBSITE.value:
        return SourceType.WEBSITE
    if value not in LEGACY_BOOK_SOURCE_TYPES and value != SourceType.BOOK.value:
        logger.debug("Unknown source type %r read as book", value)
    return SourceType.BOOK


def map_source_from_db(db_source: Any) -> Source:
    try:
        row = _row(db_source)
        if _missing(row, "id", "name", "user_id"):
            raise ValidationError("Invalid source record: missing required fields")

        return Source(
            id=row["id"],
            name=row["name"],
            type=normalize_source_type(row.get("type")),
            description=_blank_to_none(row.get("description")),
            url=_blank_to_none(row.get("url")),
            created_at=row.get("created_at"),
            user_id=row["user_id"],
        )
    except _MAPPING_ERRORS as exc:
        raise ValidationError(
            f"Failed to map source from database: {_describe(exc)}"
        ) from exc


def map_source_to_db(source: Any) -> Dict[str, Any]:
    try:
        data = _entity_input(source)
        if not data.get("id") and not data.get("name"):
            raise ValidationError("Name is required when creating a new source")
        if not data.get("id") and not data.get("type"):
            raise ValidationError("Type is required when creating a new source")

        row = {
            field: data[field]
            for field in ("id", "name", "description", "url", "created_at", "user_id")
            if field in data
        }
        if "type" in data:
            row["type"] = _enum_value(data["type"])
        return row
    except _MAPPING_ERRORS as exc:
        raise ValidationError(
            f"Failed to map source to database: {_describe(exc)}"
        ) from exc


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------


def map_tag_from_db(db_tag: Any) -> Tag:
    try:
        row = _row(db_tag)
        if _missing(row, "id", "name", "user_id"):
            raise ValidationError("Invalid tag record: missing required fields")

        category = _enum_value(row.get("category"))
        if category not in {c.value for c in TagCategory}:
            category = TagCategory.GENERAL.value

        return Tag(
            id=row["id"],
            name=row["name"],
            category=category,
            color=_blank_to_none(row.get("color")),
            description=_blank_to_none(row.get("description")),
            user_id=row["user_id"],
            created_at=row.get("created_at"),
        )
    except _MAPPING_ERRORS as exc:
        raise ValidationError(
            f"Failed to map tag from database: {_describe(exc)}"
        ) from exc


def map_tag_to_db(tag: Any) -> Dict[str, Any]:
    try:
        data = _entity_input(tag)
        if not data.get("id") and (not data.get("name") or not data.get("user_id")):
            raise ValidationError("Name and userId are required when creating a tag")

        row = {
            field: data[field]
            for field in ("id", "name", "color", "user_id", "created_at")
            if field in data
        }
        if "category" in data:
            row["category"] = _enum_value(data["category"])
        if "description" in data:
            row["description"] = data["description"] or None
        return row
    except _MAPPING_ERRORS as exc:
        raise ValidationError(
            f"Failed to map tag to database: {_describe(exc)}"
        ) from exc


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


def map_profile_from_db(db_profile: Any) -> Profile:
    try:
        row = _row(db_profile)
        if not row.get("id"):
            raise ValidationError("Invalid profile record: missing id")

        return Profile(
            id=row["id"],
            username=_blank_to_none(row.get("username")),
            avatar_url=_blank_to_none(row.get("avatar_url")),
            cuisines=_blank_to_none(row.get("cuisines")),
            updated_at=row.get("updated_at"),
        )
    except _MAPPING_ERRORS as exc:
        raise ValidationError(
            f"Failed to map profile from database: {_describe(exc)}"
        ) from exc


def map_profile_to_db(profile: Any) -> Dict[str, Any]:
    try:
        data = _entity_input(profile)
        if not data.get("id"):
            raise ValidationError("Id is required when creating/updating a profile")

        return {
            "id": data["id"],
            "username": data.get("username") or None,
            "avatar_url": data.get("avatar_url") or None,
            "cuisines": data.get("cuisines") or None,
            "updated_at": data.get("updated_at") or None,
        }
    except _MAPPING_ERRORS as exc:
        raise ValidationError(
            f"Failed to map profile to database: {_describe(exc)}"
        ) from exc


# ---------------------------------------------------------------------------
# Batch mapping
# ---------------------------------------------------------------------------


class BatchMapper:
    """Map lists of rows to entities."""

    @staticmethod
    def dishes(
        db_dishes: Iterable[Any],
        history_by_dish: Optional[Mapping[Any, Sequence[Any]]] = None,
    ) -> List[Dish]:
        history_by_dish = history_by_dish or {}
        result = []
        for db_dish in db_dishes:
            row = _row(db_dish)
            result.append(map_dish_from_db(row, history_by_dish.get(row.get("id"), [])))
        return result

    @staticmethod
    def dish_summaries(summaries: Iterable[Any]) -> List[Dish]:
        return [map_dish_from_summary(s) for s in summaries]

    @staticmethod
    def meal_history(rows: Iterable[Any]) -> List[MealHistory]:
        return [map_meal_history_from_db(r) for r in rows]

    @staticmethod
    def sources(rows: Iterable[Any]) -> List[Source]:
        return [map_source_from_db(r) for r in rows]

    @staticmethod
    def tags(rows: Iterable[Any]) -> List[Tag]:
        return [map_tag_from_db(r) for r in rows]

    @staticmethod
    def profiles(rows: Iterable[Any]) -> List[Profile]:
        return [map_profile_from_db(r) for r in rows]


map_array_from_db = BatchMapper
