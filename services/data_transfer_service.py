"""
JSON export/import of everything a user owns, and clearing it.

Export reads each table in keyset pages ordered by id. Import writes sources,
then dishes, then meal history in fixed-size batches; a failing batch is
rolled back and counted as errors while the rest of the import carries on.
Each record is built through the entity mappers and validators first; a
record that fails is skipped and counted as an error. Imported dishes may
carry cuisines outside the known list.

When every user id found in the payload is the caller's own, the import is a
same-account restore: ids are kept and existing rows are updated in place.
Otherwise fresh ids are generated and references between records are
remapped.
"""

from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Set
from uuid import UUID
import logging
import uuid

from pydantic.alias_generators import to_snake
from sqlalchemy.orm import Session

from app.config import settings
from app.error_handling import classify_error, log_error
from app.exceptions import ServiceValidationError
from domain.constants import DEFAULT_CUISINE
from domain.dates import parse_datetime, utcnow
from domain.mappers import (
    map_array_from_db,
    map_dish_from_db,
    map_dish_to_db,
    map_meal_history_from_db,
    map_meal_history_to_db,
    map_profile_from_db,
    map_source_from_db,
    map_source_to_db,
)
from domain.mappers.type_mapping import normalize_source_type
from domain.schemas import ClearDataResult, ExportData, ImportResult, ImportValidationResult
from domain.validation import (
    ValidationError,
    validate_dish,
    validate_meal_history,
    validate_source,
)
from repositories import (
    BaseRepository,
    DishRepository,
    MealHistoryRepository,
    ProfileRepository,
    SourceRepository,
    TagRepository,
)

logger = logging.getLogger("mealtracker.data_transfer")

ProgressCallback = Callable[[int, int], None]

UNKNOWN_SOURCE_NAME = "Unknown Source"
UNKNOWN_DISH_NAME = "Unknown Dish"


def _snake_keys(record: Any) -> Dict[str, Any]:
    if not isinstance(record, Mapping):
        return {}
    return {to_snake(str(key)): value for key, value in record.items()}


def _as_uuid(value: Any) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    if not value:
        return None
    try:
        return UUID(str(value))
    except ValueError:
        return None


def _log_rejected(label: str, record_id: Any, exc: ValidationError) -> None:
    logger.warning(f"import_record_rejected type={label} id={record_id} reason={exc.message}")


def _chunks(items: Sequence[Any], size: int) -> Iterator[Sequence[Any]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def _paginate(fetch: Callable[[Optional[UUID], int], List[Any]], page_size: int, key) -> List[Any]:
    """Collect every row from a keyset-paginated ``fetch(after_id, limit)``"""
    rows: List[Any] = []
    after_id = None
    while True:
        page = fetch(after_id, page_size)
        rows.extend(page)
        if len(page) < page_size:
            return rows
        after_id = key(page[-1])


def validate_json_data(data: Any) -> ImportValidationResult:
    """Check the overall shape of an export payload before importing it"""
    if not data or not isinstance(data, Mapping):
        return ImportValidationResult(valid=False, message="Invalid JSON data format")
    if not data.get("version"):
        return ImportValidationResult(valid=False, message="Missing version information")
    if not isinstance(data.get("dishes"), list):
        return ImportValidationResult(valid=False, message="Missing or invalid dishes data")
    if not isinstance(data.get("mealHistory"), list):
        return ImportValidationResult(
            valid=False, message="Missing or invalid meal history data"
        )
    if not isinstance(data.get("sources"), list):
        return ImportValidationResult(valid=False, message="Missing or invalid sources data")
    return ImportValidationResult(valid=True)


class _ImportRun:
    """State for a single import call"""

    def __init__(
        self,
        db: Session,
        user_id: UUID,
        same_account: bool,
        total: int,
        batch_size: int,
        on_progress: Optional[ProgressCallback],
    ):
        self.db = db
        self.user_id = user_id
        self.same_account = same_account
        self.total = total
        self.batch_size = batch_size
        self.on_progress = on_progress
        self.now = utcnow()

        self.processed = 0
        self.success = 0
        self.errors = 0
        self.source_ids: Dict[str, UUID] = {}
        self.dish_ids: Dict[str, UUID] = {}

    def new_id(self, raw_id: Any) -> UUID:
        existing = _as_uuid(raw_id)
        if self.same_account and existing:
            return existing
        return uuid.uuid4()

    def write(
        self,
        repo: BaseRepository,
        batch: Sequence[Any],
        rows: List[Dict[str, Any]],
        label: str,
    ) -> bool:
        """Upsert one batch in its own transaction; returns True on success"""
        skipped = len(batch) - len(rows)
        self.errors += skipped
        ok = True
        if rows:
            try:
                for row in rows:
                    repo.upsert(row, self.user_id)
                self.db.commit()
                self.success += len(rows)
            except Exception as exc:
                self.db.rollback()
                log_error(classify_error(exc), f"import {label}")
                self.errors += len(rows)
                ok = False

        self.processed += len(batch)
        logger.debug(f"import_progress label={label} processed={self.processed}/{self.total}")
        if self.on_progress:
            self.on_progress(self.processed, self.total)
        return ok


class DataTransferService:
    """Export, import and clearing of a user's data"""

    validate_json_data = staticmethod(validate_json_data)

    @staticmethod
    def export_data(db: Session, user_id: UUID, page_size: Optional[int] = None) -> ExportData:
        page_size = page_size or settings.export_page_size
        dish_repo = DishRepository(db)

        dish_rows = _paginate(
            lambda after, limit: dish_repo.summaries(user_id, after_id=after, limit=limit),
            page_size,
            key=lambda row: row["id"],
        )
        history = _paginate(
            lambda after, limit: MealHistoryRepository(db).page_for_user(user_id, after, limit),
            page_size,
            key=lambda row: row.id,
        )
        sources = _paginate(
            lambda after, limit: SourceRepository(db).page_for_user(user_id, after, limit),
            page_size,
            key=lambda row: row.id,
        )
        profile = ProfileRepository(db).get_by_id(user_id)

        logger.info(
            f"data_exported user_id={user_id} dishes={len(dish_rows)} "
            f"meal_history={len(history)} sources={len(sources)}"
        )
        return ExportData(
            dishes=map_array_from_db.dish_summaries(dish_rows),
            meal_history=map_array_from_db.meal_history(history),
            sources=map_array_from_db.sources(sources),
            profile=map_profile_from_db(profile) if profile else None,
            version=settings.export_version,
            export_date=utcnow(),
        )

    @staticmethod
    def import_data(
        db: Session,
        user_id: UUID,
        data: Any,
        on_progress: Optional[ProgressCallback] = None,
        batch_size: Optional[int] = None,
    ) -> ImportResult:
        """
        Import an export payload into the user's account.

        Every record is re-owned by ``user_id``. Missing fields get defaults;
        meal history whose dish cannot be resolved is skipped and counted as
        an error. Returns success/error counts over all records.
        """
        validation = validate_json_data(data)
        if not validation.valid:
            raise ServiceValidationError(validation.message)

        sources = data["sources"]
        dishes = data["dishes"]
        history = data["mealHistory"]

        exported_user_ids: Set[str] = set()
        for record in [*sources, *dishes, *history]:
            owner = _snake_keys(record).get("user_id")
            if owner:
                exported_user_ids.add(str(owner).lower())
        same_account = exported_user_ids == {str(user_id).lower()}

        run = _ImportRun(
            db,
            user_id,
            same_account,
            total=len(sources) + len(dishes) + len(history),
            batch_size=batch_size or settings.import_batch_size,
            on_progress=on_progress,
        )
        logger.info(
            f"import_started user_id={user_id} same_account={same_account} total={run.total}"
        )

        DataTransferService._import_sources(run, sources)
        DataTransferService._import_dishes(run, dishes)
        DataTransferService._import_meal_history(run, history)

        logger.info(
            f"import_finished user_id={user_id} success={run.success} errors={run.errors}"
        )
        return ImportResult(success=run.success, errors=run.errors, total=run.total)

    @staticmethod
    def _import_sources(run: _ImportRun, sources: Sequence[Any]) -> None:
        repo = SourceRepository(run.db)
        for batch in _chunks(sources, run.batch_size):
            rows, id_map = [], {}
            for record in batch:
                raw = _snake_keys(record)
                if not raw:
                    continue
                new_id = run.new_id(raw.get("id"))
                try:
                    row = map_source_to_db(
                        {
                            "id": new_id,
                            "name": raw.get("name") or UNKNOWN_SOURCE_NAME,
                            "type": normalize_source_type(raw.get("type")),
                            "description": raw.get("description") or None,
                            "url": raw.get("url") or None,
                            "created_at": parse_datetime(raw.get("created_at")) or run.now,
                            "user_id": run.user_id,
                        }
                    )
                    validate_source(map_source_from_db(row))
                except ValidationError as exc:
                    _log_rejected("source", raw.get("id"), exc)
                    continue
                if raw.get("id"):
                    id_map[str(raw["id"]).lower()] = new_id
                rows.append(row)
            if run.write(repo, batch, rows, "sources"):
                run.source_ids.update(id_map)

    @staticmethod
    def _import_dishes(run: _ImportRun, dishes: Sequence[Any]) -> None:
        repo = DishRepository(run.db)
        for batch in _chunks(dishes, run.batch_size):
            rows, id_map = [], {}
            for record in batch:
                raw = _snake_keys(record)
                if not raw:
                    continue
                new_id = run.new_id(raw.get("id"))
                try:
                    row = map_dish_to_db(
                        {
                            "id": new_id,
                            "name": raw.get("name") or UNKNOWN_DISH_NAME,
                            "created_at": parse_datetime(raw.get("created_at")) or run.now,
                            "cuisines": raw.get("cuisines") or [DEFAULT_CUISINE],
                            "source_id": DataTransferService._resolve_source(
                                run, raw.get("source_id")
                            ),
                            "location": raw.get("location") or None,
                            "user_id": run.user_id,
                        }
                    )
                    validate_dish(map_dish_from_db(row), allow_unknown_cuisines=True)
                except ValidationError as exc:
                    _log_rejected("dish", raw.get("id"), exc)
                    continue
                if raw.get("id"):
                    id_map[str(raw["id"]).lower()] = new_id
                rows.append(row)
            if run.write(repo, batch, rows, "dishes"):
                run.dish_ids.update(id_map)

    @staticmethod
    def _import_meal_history(run: _ImportRun, history: Sequence[Any]) -> None:
        repo = MealHistoryRepository(run.db)
        for batch in _chunks(history, run.batch_size):
            rows = []
            for record in batch:
                raw = _snake_keys(record)
                dish_id = DataTransferService._resolve_dish(
                    run, raw.get("dish_id") or raw.get("dishid")
                )
                if dish_id is None:
                    logger.warning(
                        f"import_history_skipped entry_id={raw.get('id')} reason=unresolved_dish"
                    )
                    continue
                try:
                    row = map_meal_history_to_db(
                        {
                            "id": run.new_id(raw.get("id")),
                            "dish_id": dish_id,
                            "date": parse_datetime(raw.get("date")) or run.now,
                            "notes": raw.get("notes") or None,
                            "user_id": run.user_id,
                        }
                    )
                    validate_meal_history(map_meal_history_from_db(row))
                except ValidationError as exc:
                    _log_rejected("meal_history", raw.get("id"), exc)
                    continue
                rows.append(row)
            run.write(repo, batch, rows, "meal_history")

    @staticmethod
    def _resolve_source(run: _ImportRun, reference: Any) -> Optional[UUID]:
        """Imported source id for a reference, or an existing source of the user"""
        if not reference:
            return None
        mapped = run.source_ids.get(str(reference).lower())
        if mapped:
            return mapped
        existing = _as_uuid(reference)
        if existing and SourceRepository(run.db).get_owned(existing, run.user_id):
            return existing
        return None

    @staticmethod
    def _resolve_dish(run: _ImportRun, reference: Any) -> Optional[UUID]:
        if not reference:
            return None
        mapped = run.dish_ids.get(str(reference).lower())
        if mapped:
            return mapped
        existing = _as_uuid(reference)
        if existing and DishRepository(run.db).get_owned(existing, run.user_id):
            return existing
        return None

    @staticmethod
    def clear_data(db: Session, user_id: UUID) -> ClearDataResult:
        """Delete the user's history, tag links, dishes, tags and sources"""
        dish_repo = DishRepository(db)
        try:
            meal_history = MealHistoryRepository(db).delete_for_user(user_id)
            links = dish_repo.delete_tag_links_for_user(user_id)
            dishes = dish_repo.delete_for_user(user_id)
            tags = TagRepository(db).delete_for_user(user_id)
            sources = SourceRepository(db).delete_for_user(user_id)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception(f"clear_data_failed user_id={user_id}")
            raise

        db.expire_all()
        logger.info(
            f"data_cleared user_id={user_id} meal_history={meal_history} "
            f"tag_links={links} dishes={dishes} tags={tags} sources={sources}"
        )
        return ClearDataResult(
            meal_history=meal_history, dishes=dishes, tags=tags, sources=sources
        )
