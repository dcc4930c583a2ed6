"""
Runtime validation for entities crossing the boundary between the database
and the application.

Validators accept either a pydantic entity or a plain mapping keyed by the
entity's (snake_case) field names, and raise ValidationError on the first
problem found.
"""

import re
import uuid
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, Mapping, Optional
from urllib.parse import urlparse

from pydantic import BaseModel

from app.exceptions import ServiceValidationError
from domain import constants
from domain.dates import parse_datetime, utcnow
from domain.enums import SourceType, TagCategory

REQUIRED_FIELD = "REQUIRED_FIELD"
INVALID_FORMAT = "INVALID_FORMAT"
MAX_LENGTH_EXCEEDED = "MAX_LENGTH_EXCEEDED"
INVALID_TYPE = "INVALID_TYPE"
INVALID_VALUE = "INVALID_VALUE"

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


class ValidationError(ServiceValidationError):
    """Entity validation failure pointing at a single field."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        code: Optional[str] = None,
    ):
        super().__init__(message, code=code)
        self.field = field

    def to_dict(self) -> dict:
        payload = super().to_dict()
        if self.field:
            payload["field"] = self.field
        return payload


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_string_array(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value)


def is_valid_cuisine(cuisine: Any) -> bool:
    return cuisine in constants.KNOWN_CUISINES


def is_valid_source_type(value: Any) -> bool:
    return value in {t.value for t in SourceType}


def is_valid_tag_category(value: Any) -> bool:
    return value in {c.value for c in TagCategory}


def is_valid_date(value: Any) -> bool:
    if isinstance(value, (datetime, date)):
        return True
    return parse_datetime(value) is not None


def is_valid_uuid(value: Any) -> bool:
    if isinstance(value, uuid.UUID):
        return True
    return isinstance(value, str) and bool(_UUID_RE.match(value))


def is_valid_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def validate_required(value: Any, field_name: str) -> None:
    if value is None or value == "":
        raise ValidationError(f"{field_name} is required", field_name, REQUIRED_FIELD)


def validate_max_length(value: str, max_length: int, field_name: str) -> None:
    if len(value) > max_length:
        raise ValidationError(
            f"{field_name} cannot exceed {max_length} characters",
            field_name,
            MAX_LENGTH_EXCEEDED,
        )


def validate_uuid(value: Any, field_name: str) -> None:
    if not is_valid_uuid(value):
        raise ValidationError(f"Invalid {field_name} format", field_name, INVALID_FORMAT)


def validate_date(value: Any, field_name: str) -> None:
    if not is_valid_date(value):
        raise ValidationError(f"Invalid {field_name} format", field_name, INVALID_FORMAT)


def _as_dict(entity: Any) -> Dict[str, Any]:
    if isinstance(entity, BaseModel):
        return entity.model_dump(exclude_unset=False)
    if isinstance(entity, Mapping):
        return dict(entity)
    raise ValidationError(
        f"Cannot validate object of type {type(entity).__name__}", code=INVALID_TYPE
    )


def _check_cuisines(cuisines: Any, allow_unknown: bool = False) -> None:
    if not is_string_array(cuisines):
        raise ValidationError(
            "Cuisines must be an array of strings", "cuisines", INVALID_TYPE
        )
    if allow_unknown:
        return
    for cuisine in cuisines:
        if not is_valid_cuisine(cuisine):
            raise ValidationError(
                f"Invalid cuisine type: {cuisine}", "cuisines", INVALID_VALUE
            )


# ---------------------------------------------------------------------------
# Entity validators
# ---------------------------------------------------------------------------


def validate_dish(dish: Any, allow_unknown_cuisines: bool = False) -> None:
    """
    Validate a dish entity.

    ``allow_unknown_cuisines`` keeps the array-of-strings check but accepts
    cuisines outside the known list, as carried by imported dishes.
    """
    data = _as_dict(dish)

    if not data.get("id"):
        raise ValidationError("Dish ID is required", "id", REQUIRED_FIELD)
    if _is_blank(data.get("name")):
        raise ValidationError("Dish name is required", "name", REQUIRED_FIELD)
    if not data.get("user_id"):
        raise ValidationError("User ID is required", "user_id", REQUIRED_FIELD)

    if not is_valid_uuid(data["id"]):
        raise ValidationError("Invalid dish ID format", "id", INVALID_FORMAT)
    if not is_valid_uuid(data["user_id"]):
        raise ValidationError("Invalid user ID format", "user_id", INVALID_FORMAT)

    if len(data["name"]) > constants.DISH_NAME_MAX_LENGTH:
        raise ValidationError(
            f"Dish name cannot exceed {constants.DISH_NAME_MAX_LENGTH} characters",
            "name",
            MAX_LENGTH_EXCEEDED,
        )
    location = data.get("location")
    if location and len(location) > constants.DISH_LOCATION_MAX_LENGTH:
        raise ValidationError(
            f"Location cannot exceed {constants.DISH_LOCATION_MAX_LENGTH} characters",
            "location",
            MAX_LENGTH_EXCEEDED,
        )

    if data.get("cuisines") is not None:
        _check_cuisines(data["cuisines"], allow_unknown_cuisines)
    tags = data.get("tags")
    if tags is not None and not is_string_array(tags):
        raise ValidationError("Tags must be an array of strings", "tags", INVALID_TYPE)

    times_cooked = data.get("times_cooked")
    if times_cooked is not None and times_cooked < 0:
        raise ValidationError(
            "Times cooked cannot be negative", "times_cooked", INVALID_VALUE
        )

    if data.get("created_at") and not is_valid_date(data["created_at"]):
        raise ValidationError("Invalid created date format", "created_at", INVALID_FORMAT)
    if data.get("last_made") and not is_valid_date(data["last_made"]):
        raise ValidationError("Invalid last made date format", "last_made", INVALID_FORMAT)

    if data.get("source_id") and not is_valid_uuid(data["source_id"]):
        raise ValidationError("Invalid source ID format", "source_id", INVALID_FORMAT)


def validate_meal_history(entry: Any) -> None:
    data = _as_dict(entry)

    if not data.get("id"):
        raise ValidationError("Meal history ID is required", "id", REQUIRED_FIELD)
    if not data.get("dish_id"):
        raise ValidationError("Dish ID is required", "dish_id", REQUIRED_FIELD)
    if not data.get("user_id"):
        raise ValidationError("User ID is required", "user_id", REQUIRED_FIELD)
    if not data.get("date"):
        raise ValidationError("Date is required", "date", REQUIRED_FIELD)

    if not is_valid_uuid(data["id"]):
        raise ValidationError("Invalid meal history ID format", "id", INVALID_FORMAT)
    if not is_valid_uuid(data["dish_id"]):
        raise ValidationError("Invalid dish ID format", "dish_id", INVALID_FORMAT)
    if not is_valid_uuid(data["user_id"]):
        raise ValidationError("Invalid user ID format", "user_id", INVALID_FORMAT)
    if not is_valid_date(data["date"]):
        raise ValidationError("Invalid date format", "date", INVALID_FORMAT)

    notes = data.get("notes")
    if notes and len(notes) > constants.MEAL_HISTORY_NOTES_MAX_LENGTH:
        raise ValidationError(
            f"Notes cannot exceed {constants.MEAL_HISTORY_NOTES_MAX_LENGTH} characters",
            "notes",
            MAX_LENGTH_EXCEEDED,
        )

    if parse_datetime(data["date"]) > utcnow():
        raise ValidationError("Meal date cannot be in the future", "date", INVALID_VALUE)


def validate_source(source: Any) -> None:
    data = _as_dict(source)
    source_type = data.get("type")
    if isinstance(source_type, SourceType):
        source_type = source_type.value

    if not data.get("id"):
        raise ValidationError("Source ID is required", "id", REQUIRED_FIELD)
    if _is_blank(data.get("name")):
        raise ValidationError("Source name is required", "name", REQUIRED_FIELD)
    if not source_type:
        raise ValidationError("Source type is required", "type", REQUIRED_FIELD)
    if not data.get("user_id"):
        raise ValidationError("User ID is required", "user_id", REQUIRED_FIELD)

    if not is_valid_uuid(data["id"]):
        raise ValidationError("Invalid source ID format", "id", INVALID_FORMAT)
    if not is_valid_uuid(data["user_id"]):
        raise ValidationError("Invalid user ID format", "user_id", INVALID_FORMAT)
    if not is_valid_source_type(source_type):
        raise ValidationError(
            'Source type must be "book" or "website"', "type", INVALID_VALUE
        )

    if len(data["name"]) > constants.SOURCE_NAME_MAX_LENGTH:
        raise ValidationError(
            f"Source name cannot exceed {constants.SOURCE_NAME_MAX_LENGTH} characters",
            "name",
            MAX_LENGTH_EXCEEDED,
        )
    description = data.get("description")
    if description and len(description) > constants.SOURCE_DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            f"Description cannot exceed {constants.SOURCE_DESCRIPTION_MAX_LENGTH} characters",
            "description",
            MAX_LENGTH_EXCEEDED,
        )
    url = data.get("url")
    if url and len(url) > constants.SOURCE_URL_MAX_LENGTH:
        raise ValidationError(
            f"URL cannot exceed {constants.SOURCE_URL_MAX_LENGTH} characters",
            "url",
            MAX_LENGTH_EXCEEDED,
        )

    if source_type == SourceType.WEBSITE.value and url and not is_valid_url(url):
        raise ValidationError(
            "Invalid URL format for website source", "url", INVALID_FORMAT
        )

    if data.get("created_at") and not is_valid_date(data["created_at"]):
        raise ValidationError("Invalid created date format", "created_at", INVALID_FORMAT)


def validate_tag(tag: Any) -> None:
    data = _as_dict(tag)
    category = data.get("category")
    if isinstance(category, TagCategory):
        category = category.value

    if not data.get("id"):
        raise ValidationError("Tag ID is required", "id", REQUIRED_FIELD)
    if _is_blank(data.get("name")):
        raise ValidationError("Tag name is required", "name", REQUIRED_FIELD)
    if not data.get("user_id"):
        raise ValidationError("User ID is required", "user_id", REQUIRED_FIELD)

    if not is_valid_uuid(data["id"]):
        raise ValidationError("Invalid tag ID format", "id", INVALID_FORMAT)
    if not is_valid_uuid(data["user_id"]):
        raise ValidationError("Invalid user ID format", "user_id", INVALID_FORMAT)
    if category and not is_valid_tag_category(category):
        raise ValidationError(
            'Tag category must be "cuisine" or "general"', "category", INVALID_VALUE
        )

    if len(data["name"]) > constants.TAG_NAME_MAX_LENGTH:
        raise ValidationError(
            f"Tag name cannot exceed {constants.TAG_NAME_MAX_LENGTH} characters",
            "name",
            MAX_LENGTH_EXCEEDED,
        )
    description = data.get("description")
    if description and len(description) > constants.TAG_DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            f"Description cannot exceed {constants.TAG_DESCRIPTION_MAX_LENGTH} characters",
            "description",
            MAX_LENGTH_EXCEEDED,
        )

    if data.get("created_at") and not is_valid_date(data["created_at"]):
        raise ValidationError("Invalid created date format", "created_at", INVALID_FORMAT)


def validate_profile(profile: Any) -> None:
    data = _as_dict(profile)

    if not data.get("id"):
        raise ValidationError("Profile ID is required", "id", REQUIRED_FIELD)
    if not is_valid_uuid(data["id"]):
        raise ValidationError("Invalid profile ID format", "id", INVALID_FORMAT)

    if data.get("cuisines"):
        _check_cuisines(data["cuisines"])

    if data.get("updated_at") and not is_valid_date(data["updated_at"]):
        raise ValidationError("Invalid updated date format", "updated_at", INVALID_FORMAT)


_VALIDATORS: Dict[str, Callable[[Any], None]] = {
    "dish": validate_dish,
    "meal_history": validate_meal_history,
    "source": validate_source,
    "tag": validate_tag,
    "profile": validate_profile,
}


def validate_entity(entity_type: str, entity: Any) -> None:
    """Dispatch to the validator registered for ``entity_type``."""
    validator = _VALIDATORS.get(entity_type)
    if validator is None:
        raise ValidationError(f"Unknown entity type: {entity_type}")
    validator(entity)


def validate_entities(entity_type: str, entities: Iterable[Any]) -> None:
    for index, entity in enumerate(entities):
        try:
            validate_entity(entity_type, entity)
        except ValidationError as exc:
            raise ValidationError(
                f"Validation failed for {entity_type} at index {index}: {exc.message}",
                exc.field,
                exc.code,
            ) from exc


def format_validation_error(error: ValidationError) -> str:
    field_info = f" (Field: {error.field})" if error.field else ""
    code_info = f" [{error.code}]" if error.code else ""
    return f"{error.message}{field_info}{code_info}"
