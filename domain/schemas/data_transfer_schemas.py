"""Schemas for JSON export/import, CSV import and data clearing"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from domain.schemas.entity_schemas import CamelModel, Dish, MealHistory, Profile, Source


class ExportData(CamelModel):
    """Everything a user owns, in entity format"""

    dishes: List[Dish] = Field(default_factory=list)
    meal_history: List[MealHistory] = Field(default_factory=list)
    sources: List[Source] = Field(default_factory=list)
    profile: Optional[Profile] = None
    version: str
    export_date: datetime


class ImportValidationResult(CamelModel):
    valid: bool
    message: Optional[str] = None


class ImportResult(CamelModel):
    success: int = 0
    errors: int = 0
    total: int = 0


class CsvSource(CamelModel):
    """Source parsed from a dish name suffix such as ``(RICE80)``"""

    type: Literal["url", "book", "none"]
    value: str
    page: Optional[int] = None


class CsvRow(CamelModel):
    date: datetime
    dish: str
    notes: Optional[str] = None
    source: Optional[CsvSource] = None


class CsvImportRequest(CamelModel):
    content: str = Field(..., description="CSV text with date,dish,notes columns")


class CsvImportResult(CamelModel):
    rows: int = 0
    dishes_created: int = 0
    sources_created: int = 0
    entries_created: int = 0
    skipped: int = 0


class ClearDataResult(CamelModel):
    meal_history: int = 0
    dishes: int = 0
    tags: int = 0
    sources: int = 0
