"""
Import cooking history from ``date,dish,notes`` CSV text.

Dish names may carry their source in a trailing parenthesised suffix:
``Mapo Tofu (RICE80)`` is page 80 of the book "RICE"; ``(pdf)`` or a value
containing ``http`` is an online source; anything else names a book.
"""

from collections import OrderedDict
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
from uuid import UUID
import logging
import re

from sqlalchemy.orm import Session

from app.exceptions import ServiceValidationError
from domain.constants import DEFAULT_CUISINE
from domain.dates import parse_datetime, utcnow
from domain.enums import SourceType
from domain.models import Dish as DishModel
from domain.models import MealHistory as MealHistoryModel
from domain.models import Source as SourceModel
from domain.schemas import CsvImportResult, CsvRow, CsvSource
from repositories import DishRepository, MealHistoryRepository, SourceRepository

logger = logging.getLogger("mealtracker.csv_import")

_SOURCE_SUFFIX_RE = re.compile(r"^(.*?)\s*\((.*?)\)$")
_BOOK_PAGE_RE = re.compile(r"^([A-Za-z0-9 ]+?)([0-9]+)$")
PDF_SOURCE_NAME = "PDF Document"
_FALLBACK_DATE_FORMATS = ("%m/%d/%Y", "%Y/%m/%d", "%d %b %Y", "%b %d, %Y")


def remove_double_quotes(value: str) -> str:
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value


def parse_csv_line(line: str) -> List[str]:
    """Split one CSV line; commas inside double quotes do not split fields"""
    fields = []
    current = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
    fields.append("".join(current))
    return [remove_double_quotes(field.strip()) for field in fields]


def extract_source_from_dish(dish: str) -> Tuple[str, Optional[CsvSource]]:
    """Split ``"Name (SOURCE)"`` into the dish name and its source"""
    match = _SOURCE_SUFFIX_RE.match(dish)
    if not match:
        return dish.strip(), None

    dish_name, source_info = match.group(1).strip(), match.group(2)

    book_page = _BOOK_PAGE_RE.match(source_info)
    if book_page:
        return dish_name, CsvSource(
            type="book", value=book_page.group(1).strip(), page=int(book_page.group(2))
        )

    lowered = source_info.lower()
    if lowered == "pdf" or "http" in lowered:
        value = PDF_SOURCE_NAME if lowered == "pdf" else source_info
        return dish_name, CsvSource(type="url", value=value)

    return dish_name, CsvSource(type="book", value=source_info.strip())


def _parse_csv_date(text: str) -> Optional[datetime]:
    parsed = parse_datetime(text)
    if parsed is not None:
        return parsed
    for fmt in _FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return None


def parse_csv_data(content: str) -> List[CsvRow]:
    """
    Parse CSV text into rows.

    A first line mentioning ``date`` or ``dish`` is a header. Lines without a
    date or a dish are dropped; unparseable dates fall back to now.
    """
    lines = [line for line in re.split(r"\r?\n", content) if line.strip()]
    if not lines:
        return []

    header = lines[0].lower()
    start = 1 if "date" in header or "dish" in header else 0

    rows = []
    for number, line in enumerate(lines[start:], start=start + 1):
        fields = parse_csv_line(line)
        date_text = fields[0] if fields else ""
        dish_text = fields[1] if len(fields) > 1 else ""
        notes = fields[2] if len(fields) > 2 else None

        if not date_text or not dish_text:
            logger.warning(f"csv_line_skipped line={number} reason=missing_date_or_dish")
            continue

        date = _parse_csv_date(date_text)
        if date is None:
            logger.warning(f"csv_invalid_date line={number} value={date_text!r}")
            date = utcnow()

        dish_name, source = extract_source_from_dish(dish_text)
        if not dish_name:
            continue
        rows.append(CsvRow(date=date, dish=dish_name, notes=notes or None, source=source))
    return rows


class CsvImportService:
    """Import meal history rows, creating dishes and sources as needed"""

    @staticmethod
    def import_csv(db: Session, user_id: UUID, content: str) -> CsvImportResult:
        rows = parse_csv_data(content)
        if not rows:
            raise ServiceValidationError("No valid rows found in CSV data")

        result = CsvImportResult(rows=len(rows))
        by_dish: "OrderedDict[str, List[CsvRow]]" = OrderedDict()
        for row in rows:
            by_dish.setdefault(row.dish.lower(), []).append(row)

        source_cache: Dict[str, SourceModel] = {}
        try:
            for dish_rows in by_dish.values():
                dish = CsvImportService._find_or_create_dish(
                    db, user_id, dish_rows[0], source_cache, result
                )
                existing_dates = {
                    parse_datetime(entry.date)
                    for entry in MealHistoryRepository(db).list_for_dish(dish.id)
                }
                for row in dish_rows:
                    if row.date in existing_dates:
                        result.skipped += 1
                        continue
                    db.add(
                        MealHistoryModel(
                            dishid=dish.id,
                            date=row.date,
                            notes=row.notes,
                            user_id=user_id,
                        )
                    )
                    existing_dates.add(row.date)
                    result.entries_created += 1
            db.commit()
        except Exception:
            db.rollback()
            logger.exception(f"csv_import_failed user_id={user_id}")
            raise

        logger.info(
            f"csv_imported user_id={user_id} rows={result.rows} "
            f"dishes_created={result.dishes_created} entries={result.entries_created} "
            f"skipped={result.skipped}"
        )
        return result

    @staticmethod
    def _find_or_create_dish(
        db: Session,
        user_id: UUID,
        row: CsvRow,
        source_cache: Dict[str, SourceModel],
        result: CsvImportResult,
    ) -> DishModel:
        dish = DishRepository(db).find_by_name(user_id, row.dish)
        if dish:
            return dish

        source = None
        if row.source and row.source.type != "none" and row.source.value:
            source = CsvImportService._find_or_create_source(
                db, user_id, row.source, source_cache, result
            )

        dish = DishModel(
            name=row.dish,
            createdat=row.date,
            cuisines=[DEFAULT_CUISINE],
            source=source,
            location=str(row.source.page) if row.source and row.source.page else None,
            user_id=user_id,
        )
        db.add(dish)
        db.flush()
        result.dishes_created += 1
        return dish

    @staticmethod
    def _find_or_create_source(
        db: Session,
        user_id: UUID,
        csv_source: CsvSource,
        cache: Dict[str, SourceModel],
        result: CsvImportResult,
    ) -> SourceModel:
        key = csv_source.value.lower()
        if key in cache:
            return cache[key]

        source = SourceRepository(db).find_by_name(user_id, csv_source.value)
        if source is None:
            is_url = csv_source.type == "url"
            source = SourceModel(
                name=csv_source.value,
                type=(SourceType.WEBSITE if is_url else SourceType.BOOK).value,
                url=csv_source.value if is_url and "http" in key else None,
                user_id=user_id,
            )
            db.add(source)
            db.flush()
            result.sources_created += 1

        cache[key] = source
        return source
