"""
Tests for JSON export/import, CSV import and clearing a user's data.
"""

import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy.orm import Session

from app.exceptions import ServiceValidationError
from domain.enums import SourceType
from domain.models import Dish as DishModel, MealHistory as MealHistoryModel
from domain.models import Source as SourceModel
from domain.schemas import DishUpdate, ProfileUpdate
from services import (
    CsvImportService,
    DataTransferService,
    DishService,
    MealHistoryService,
    ProfileService,
    SourceService,
)
from services.stats_service import StatsService
from services.suggestion_service import SuggestionService
from services.csv_import_service import (
    extract_source_from_dish,
    parse_csv_data,
    parse_csv_line,
)
from services.data_transfer_service import validate_json_data
from test_fixtures import db_session, days_ago, make_dish, make_source, make_tag, user_id


def seed_account(db: Session, owner: uuid.UUID):
    source = make_source(db, owner, "Ottolenghi Simple")
    make_dish(db, owner, "Roast Cauliflower", ["Mediterranean"], source=source, cooked=[days_ago(3)])
    make_dish(db, owner, "Miso Soup", ["Japanese"], cooked=[days_ago(1), days_ago(6)], notes="Add tofu")
    return source


def export_payload(db: Session, owner: uuid.UUID) -> dict:
    return DataTransferService.export_data(db, owner).model_dump(mode="json", by_alias=True)


# =============================================================================
# EXPORT
# =============================================================================


def test_export_contains_everything_owned(db_session: Session, user_id):
    seed_account(db_session, user_id)
    make_dish(db_session, uuid.uuid4(), "Someone else's")
    ProfileService.update_profile(db_session, user_id, ProfileUpdate(username="cook"))

    export = DataTransferService.export_data(db_session, user_id)

    assert export.version == "1.0"
    assert sorted(d.name for d in export.dishes) == ["Miso Soup", "Roast Cauliflower"]
    assert len(export.meal_history) == 3
    assert [s.name for s in export.sources] == ["Ottolenghi Simple"]
    assert export.profile.username == "cook"
    assert export.export_date.tzinfo is not None


def test_export_pages_through_every_row(db_session: Session, user_id):
    for name in ("A", "B", "C"):
        make_dish(db_session, user_id, name, cooked=[days_ago(1)])

    export = DataTransferService.export_data(db_session, user_id, page_size=1)

    assert sorted(d.name for d in export.dishes) == ["A", "B", "C"]
    assert len(export.meal_history) == 3


def test_export_uses_camel_case_keys(db_session: Session, user_id):
    seed_account(db_session, user_id)
    payload = export_payload(db_session, user_id)

    assert {"dishes", "mealHistory", "sources", "version", "exportDate"} <= set(payload)
    assert "dishId" in payload["mealHistory"][0]
    assert "timesCooked" in payload["dishes"][0]


# =============================================================================
# IMPORT VALIDATION
# =============================================================================


@pytest.mark.parametrize(
    "data, message",
    [
        (None, "Invalid JSON data format"),
        ([], "Invalid JSON data format"),
        ({"dishes": []}, "Missing version information"),
        ({"version": "1.0"}, "Missing or invalid dishes data"),
        ({"version": "1.0", "dishes": []}, "Missing or invalid meal history data"),
        (
            {"version": "1.0", "dishes": [], "mealHistory": []},
            "Missing or invalid sources data",
        ),
    ],
)
def test_validate_json_data_messages(data, message):
    result = validate_json_data(data)
    assert result.valid is False
    assert result.message == message


def test_validate_json_data_accepts_minimal_payload():
    result = validate_json_data(
        {"version": "1.0", "dishes": [], "mealHistory": [], "sources": []}
    )
    assert result.valid is True
    assert result.message is None


def test_import_rejects_invalid_payload(db_session: Session, user_id):
    with pytest.raises(ServiceValidationError) as exc_info:
        DataTransferService.import_data(db_session, user_id, {"version": "1.0"})
    assert exc_info.value.message == "Missing or invalid dishes data"


# =============================================================================
# IMPORT
# =============================================================================


def test_import_into_another_account_remaps_ids(db_session: Session):
    original_owner, new_owner = uuid.uuid4(), uuid.uuid4()
    original_source = seed_account(db_session, original_owner)
    payload = export_payload(db_session, original_owner)

    result = DataTransferService.import_data(db_session, new_owner, payload)

    assert result.total == 6
    assert result.success == 6
    assert result.errors == 0

    dishes = {d.name: d for d in DishService.list_dishes(db_session, new_owner)}
    assert set(dishes) == {"Miso Soup", "Roast Cauliflower"}
    assert dishes["Miso Soup"].times_cooked == 2
    assert dishes["Miso Soup"].last_comment == "Add tofu"

    [source] = SourceService.list_sources(db_session, new_owner)
    assert source.id != original_source.id
    assert dishes["Roast Cauliflower"].source_id == source.id

    # the original account is untouched
    assert len(DishService.list_dishes(db_session, original_owner)) == 2


def test_same_account_restore_keeps_ids(db_session: Session, user_id):
    seed_account(db_session, user_id)
    payload = export_payload(db_session, user_id)
    original_ids = sorted(d["id"] for d in payload["dishes"])

    DataTransferService.clear_data(db_session, user_id)
    result = DataTransferService.import_data(db_session, user_id, payload)

    assert result.success == result.total == 6
    restored = DishService.list_dishes(db_session, user_id)
    assert sorted(str(d.id) for d in restored) == original_ids


def test_same_account_import_updates_in_place(db_session: Session, user_id):
    seed_account(db_session, user_id)
    payload = export_payload(db_session, user_id)
    payload["dishes"][0]["location"] = "p. 99"

    result = DataTransferService.import_data(db_session, user_id, payload)

    assert result.errors == 0
    assert db_session.query(DishModel).count() == 2
    assert db_session.query(MealHistoryModel).count() == 3
    dish = DishService.get_dish(db_session, user_id, uuid.UUID(payload["dishes"][0]["id"]))
    assert dish.location == "p. 99"


def test_import_fills_defaults_for_missing_fields(db_session: Session, user_id):
    payload = {
        "version": "1.0",
        "sources": [{"id": "s-1", "type": "document"}],
        "dishes": [{"id": "d-1", "sourceId": "s-1"}],
        "mealHistory": [{"dishId": "d-1", "notes": ""}],
    }

    result = DataTransferService.import_data(db_session, user_id, payload)

    assert result.success == 3
    [source] = SourceService.list_sources(db_session, user_id)
    assert source.name == "Unknown Source"
    assert source.type == SourceType.BOOK
    [dish] = DishService.list_dishes(db_session, user_id)
    assert dish.name == "Unknown Dish"
    assert dish.cuisines == ["Other"]
    assert dish.source_id == source.id
    assert dish.times_cooked == 1


def test_import_skips_history_with_unknown_dish(db_session: Session, user_id):
    payload = {
        "version": "1.0",
        "sources": [],
        "dishes": [{"id": "d-1", "name": "Gumbo"}],
        "mealHistory": [
            {"dishId": "d-1", "date": "2024-01-01T18:00:00Z"},
            {"dishId": "missing", "date": "2024-01-02T18:00:00Z"},
        ],
    }

    result = DataTransferService.import_data(db_session, user_id, payload)

    assert result.total == 3
    assert result.success == 2
    assert result.errors == 1
    [entry] = MealHistoryService.list_history(db_session, user_id)
    assert entry.date == datetime(2024, 1, 1, 18, 0, tzinfo=timezone.utc)


def test_import_rejects_dishes_with_wrong_field_types(db_session: Session, user_id):
    payload = {
        "version": "1.0",
        "sources": [],
        "dishes": [
            {"id": "d-1", "name": "Carbonara", "cuisines": "Italian"},
            {"id": "d-2", "name": 42},
            {"id": "d-3", "name": "Bibimbap", "location": 7},
            {"id": "d-4", "name": "Pho", "cuisines": ["Vietnamese"]},
        ],
        "mealHistory": [
            {"dishId": "d-1", "date": "2024-01-01T18:00:00Z"},
            {"dishId": "d-4", "date": "2024-01-02T18:00:00Z"},
        ],
    }

    result = DataTransferService.import_data(db_session, user_id, payload)

    assert result.total == 6
    assert result.success == 2
    assert result.errors == 4
    assert [d.name for d in DishService.list_dishes(db_session, user_id)] == ["Pho"]
    assert StatsService.get_stats(db_session, user_id).cuisine_breakdown == {"Vietnamese": 1}
    assert len(SuggestionService.get_suggestions(db_session, user_id)) == 4
    assert [d["name"] for d in export_payload(db_session, user_id)["dishes"]] == ["Pho"]


def test_imported_dish_with_unknown_cuisine_stays_editable(db_session: Session, user_id):
    payload = {
        "version": "1.0",
        "sources": [],
        "dishes": [{"id": "d-1", "name": "Gumbo", "cuisines": ["Cajun"]}],
        "mealHistory": [],
    }
    assert DataTransferService.import_data(db_session, user_id, payload).success == 1
    [dish] = DishService.list_dishes(db_session, user_id)

    updated = DishService.update_dish(db_session, user_id, dish.id, DishUpdate(location="p. 12"))

    assert updated.location == "p. 12"
    assert updated.cuisines == ["Cajun"]


def test_failed_batch_is_counted_and_import_continues(db_session: Session, user_id):
    taken = make_source(db_session, uuid.uuid4(), "Belongs to someone else")
    payload = {
        "version": "1.0",
        "sources": [
            {"id": str(taken.id), "name": "Clash", "type": "book", "userId": str(user_id)},
            {"id": str(uuid.uuid4()), "name": "Fine", "type": "book", "userId": str(user_id)},
        ],
        "dishes": [{"id": str(uuid.uuid4()), "name": "Okonomiyaki", "userId": str(user_id)}],
        "mealHistory": [],
    }
    progress = []

    result = DataTransferService.import_data(
        db_session,
        user_id,
        payload,
        on_progress=lambda done, total: progress.append((done, total)),
        batch_size=1,
    )

    assert result.success == 2
    assert result.errors == 1
    assert progress == [(1, 3), (2, 3), (3, 3)]
    assert [s.name for s in SourceService.list_sources(db_session, user_id)] == ["Fine"]
    assert db_session.get(SourceModel, taken.id).name == "Belongs to someone else"


# =============================================================================
# CLEAR
# =============================================================================


def test_clear_data_removes_everything_but_the_profile(db_session: Session, user_id):
    seed_account(db_session, user_id)
    tag = make_tag(db_session, user_id, "Soup")
    dish = DishService.list_dishes(db_session, user_id)[0]
    DishService.add_tag(db_session, user_id, dish.id, tag.id)
    ProfileService.update_profile(db_session, user_id, ProfileUpdate(username="keeper"))
    bystander = make_dish(db_session, uuid.uuid4(), "Untouched", cooked=[days_ago(1)])

    result = DataTransferService.clear_data(db_session, user_id)

    assert result.meal_history == 3
    assert result.dishes == 2
    assert result.tags == 1
    assert result.sources == 1
    assert DishService.list_dishes(db_session, user_id) == []
    assert ProfileService.get_profile(db_session, user_id).username == "keeper"
    assert db_session.get(DishModel, bystander.id) is not None


# =============================================================================
# CSV IMPORT
# =============================================================================


def test_parse_csv_line_respects_quotes():
    assert parse_csv_line('2024-01-15,"Curry, Thai style", Good ') == [
        "2024-01-15",
        "Curry, Thai style",
        "Good",
    ]


@pytest.mark.parametrize(
    "text, name, source_type, value, page",
    [
        ("Mapo Tofu (RICE80)", "Mapo Tofu", "book", "RICE", 80),
        ("Pasta (pdf)", "Pasta", "url", "PDF Document", None),
        ("Soup (https://example.com/soup)", "Soup", "url", "https://example.com/soup", None),
        ("Stew (Joy of Cooking)", "Stew", "book", "Joy of Cooking", None),
    ],
)
def test_extract_source_from_dish(text, name, source_type, value, page):
    dish_name, source = extract_source_from_dish(text)
    assert dish_name == name
    assert source.type == source_type
    assert source.value == value
    assert source.page == page


def test_extract_source_without_suffix():
    assert extract_source_from_dish(" Plain Rice ") == ("Plain Rice", None)


def test_parse_csv_data_header_and_bad_rows():
    content = (
        "date,dish,notes\n"
        "2024-01-15,Mapo Tofu (RICE80),Spicy\n"
        ",Missing date,\n"
        "01/20/2024,Pasta (pdf),\n"
    )

    rows = parse_csv_data(content)

    assert [row.dish for row in rows] == ["Mapo Tofu", "Pasta"]
    assert rows[0].date == datetime(2024, 1, 15, tzinfo=timezone.utc)
    assert rows[0].notes == "Spicy"
    assert rows[1].date == datetime(2024, 1, 20, tzinfo=timezone.utc)
    assert rows[1].notes is None


def test_csv_import_creates_dishes_sources_and_history(db_session: Session, user_id):
    content = (
        "2024-01-15,Mapo Tofu (RICE80),Spicy\n"
        "2024-02-01,mapo tofu (RICE80),\n"
        "2024-02-03,Pasta (pdf),Weeknight\n"
    )

    result = CsvImportService.import_csv(db_session, user_id, content)

    assert result.rows == 3
    assert result.dishes_created == 2
    assert result.sources_created == 2
    assert result.entries_created == 3
    assert result.skipped == 0

    dishes = {d.name: d for d in DishService.list_dishes(db_session, user_id)}
    assert dishes["Mapo Tofu"].times_cooked == 2
    assert dishes["Mapo Tofu"].location == "80"
    sources = {s.name: s for s in SourceService.list_sources(db_session, user_id)}
    assert sources["RICE"].type == SourceType.BOOK
    assert sources["PDF Document"].type == SourceType.WEBSITE
    assert sources["PDF Document"].url is None
    assert dishes["Pasta"].source_id == sources["PDF Document"].id


def test_csv_import_twice_skips_existing_entries(db_session: Session, user_id):
    content = "2024-01-15,Dal\n2024-01-16,Dal\n"
    CsvImportService.import_csv(db_session, user_id, content)

    again = CsvImportService.import_csv(db_session, user_id, content)

    assert again.dishes_created == 0
    assert again.entries_created == 0
    assert again.skipped == 2
    assert db_session.query(MealHistoryModel).count() == 2


def test_csv_import_reuses_existing_dish(db_session: Session, user_id):
    existing = make_dish(db_session, user_id, "Pho", ["Vietnamese"])

    result = CsvImportService.import_csv(db_session, user_id, "2024-03-01,PHO\n")

    assert result.dishes_created == 0
    assert DishService.get_dish(db_session, user_id, existing.id).times_cooked == 1


def test_csv_import_without_rows_is_rejected(db_session: Session, user_id):
    with pytest.raises(ServiceValidationError):
        CsvImportService.import_csv(db_session, user_id, "date,dish,notes\n")
