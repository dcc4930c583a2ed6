"""
Tests for entity validation rules.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from domain.validation import (
    ValidationError,
    format_validation_error,
    is_string,
    is_string_array,
    is_valid_cuisine,
    is_valid_date,
    is_valid_source_type,
    is_valid_tag_category,
    is_valid_url,
    is_valid_uuid,
    validate_dish,
    validate_entities,
    validate_entity,
    validate_meal_history,
    validate_profile,
    validate_date,
    validate_max_length,
    validate_required,
    validate_source,
    validate_tag,
    validate_uuid,
)


def valid_dish(**overrides):
    dish = {
        "id": str(uuid.uuid4()),
        "name": "Pad Thai",
        "user_id": str(uuid.uuid4()),
        "cuisines": ["Thai"],
    }
    dish.update(overrides)
    return dish


def valid_entry(**overrides):
    entry = {
        "id": uuid.uuid4(),
        "dish_id": uuid.uuid4(),
        "user_id": uuid.uuid4(),
        "date": datetime.now(timezone.utc) - timedelta(days=1),
    }
    entry.update(overrides)
    return entry


def test_valid_dish_passes():
    validate_dish(valid_dish())


@pytest.mark.parametrize(
    "overrides, field, code",
    [
        ({"name": "  "}, "name", "REQUIRED_FIELD"),
        ({"id": "not-a-uuid"}, "id", "INVALID_FORMAT"),
        ({"name": "x" * 256}, "name", "MAX_LENGTH_EXCEEDED"),
        ({"cuisines": ["Martian"]}, "cuisines", "INVALID_VALUE"),
        ({"cuisines": "Thai"}, "cuisines", "INVALID_TYPE"),
        ({"times_cooked": -1}, "times_cooked", "INVALID_VALUE"),
        ({"source_id": "nope"}, "source_id", "INVALID_FORMAT"),
    ],
)
def test_invalid_dish_reports_field_and_code(overrides, field, code):
    with pytest.raises(ValidationError) as exc_info:
        validate_dish(valid_dish(**overrides))
    assert exc_info.value.field == field
    assert exc_info.value.code == code


def test_meal_history_in_the_future_is_rejected():
    with pytest.raises(ValidationError) as exc_info:
        validate_meal_history(
            valid_entry(date=datetime.now(timezone.utc) + timedelta(days=1))
        )
    assert exc_info.value.message == "Meal date cannot be in the future"


def test_meal_history_requires_dish_and_date():
    with pytest.raises(ValidationError) as exc_info:
        validate_meal_history(valid_entry(dish_id=None))
    assert exc_info.value.field == "dish_id"

    with pytest.raises(ValidationError) as exc_info:
        validate_meal_history(valid_entry(date="yesterday"))
    assert exc_info.value.field == "date"


def test_meal_history_notes_limit():
    validate_meal_history(valid_entry(notes="x" * 1000))
    with pytest.raises(ValidationError):
        validate_meal_history(valid_entry(notes="x" * 1001))


def test_source_type_and_website_url():
    base = {"id": uuid.uuid4(), "name": "Serious Eats", "user_id": uuid.uuid4()}

    validate_source({**base, "type": "website", "url": "https://www.seriouseats.com"})
    validate_source({**base, "type": "book"})

    with pytest.raises(ValidationError) as exc_info:
        validate_source({**base, "type": "magazine"})
    assert exc_info.value.field == "type"

    with pytest.raises(ValidationError) as exc_info:
        validate_source({**base, "type": "website", "url": "seriouseats"})
    assert exc_info.value.field == "url"


def test_tag_category():
    base = {"id": uuid.uuid4(), "name": "Quick", "user_id": uuid.uuid4()}
    validate_tag({**base, "category": "cuisine"})
    with pytest.raises(ValidationError):
        validate_tag({**base, "category": "mood"})


def test_profile_cuisines_must_be_known():
    validate_profile({"id": uuid.uuid4(), "cuisines": ["Italian", "Greek"]})
    with pytest.raises(ValidationError):
        validate_profile({"id": uuid.uuid4(), "cuisines": ["Atlantean"]})


def test_validate_entity_dispatch_and_unknown_type():
    validate_entity("dish", valid_dish())
    with pytest.raises(ValidationError) as exc_info:
        validate_entity("recipe", {})
    assert "Unknown entity type" in exc_info.value.message


def test_validate_entities_reports_index():
    with pytest.raises(ValidationError) as exc_info:
        validate_entities("dish", [valid_dish(), valid_dish(name="")])
    assert "at index 1" in exc_info.value.message
    assert exc_info.value.field == "name"


def test_format_validation_error():
    error = ValidationError("Dish name is required", "name", "REQUIRED_FIELD")
    assert (
        format_validation_error(error)
        == "Dish name is required (Field: name) [REQUIRED_FIELD]"
    )
    assert format_validation_error(ValidationError("Oops")) == "Oops"


def test_predicates():
    assert is_valid_uuid(str(uuid.uuid4()))
    assert not is_valid_uuid("1234")
    assert is_valid_url("http://example.com/recipe")
    assert not is_valid_url("ftp://example.com")

    with pytest.raises(ValidationError):
        validate_required("", "name")


def test_type_and_value_predicates():
    assert is_string("Ramen")
    assert not is_string(3)
    assert is_string_array(["Thai", "Korean"])
    assert not is_string_array(["Thai", 1])
    assert is_valid_cuisine("Japanese")
    assert not is_valid_cuisine("Martian")
    assert is_valid_source_type("website")
    assert not is_valid_source_type("document")
    assert is_valid_tag_category("cuisine")
    assert not is_valid_tag_category("mood")
    assert is_valid_date("2024-02-29T19:30:00Z")
    assert not is_valid_date("yesterday")


@pytest.mark.parametrize(
    "check, code",
    [
        (lambda: validate_max_length("x" * 6, 5, "name"), "MAX_LENGTH_EXCEEDED"),
        (lambda: validate_uuid("abc", "dish_id"), "INVALID_FORMAT"),
        (lambda: validate_date("31/31/2024", "date"), "INVALID_FORMAT"),
    ],
)
def test_field_helpers_raise_with_code(check, code):
    with pytest.raises(ValidationError) as exc_info:
        check()
    assert exc_info.value.code == code


def test_field_helpers_accept_valid_values():
    validate_max_length("x" * 5, 5, "name")
    validate_uuid(uuid.uuid4(), "dish_id")
    validate_date(datetime.now(timezone.utc), "date")
