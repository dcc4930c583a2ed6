"""
Domain schemas package - Pydantic models for validation.
"""

from domain.schemas.entity_schemas import (
    CamelModel,
    DishEntity,
    Dish,
    MealHistory,
    MealHistoryWithDish,
    Source,
    Tag,
    Profile,
)
from domain.schemas.dish_schemas import DishCreate, DishUpdate, DishTagsUpdate
from domain.schemas.meal_history_schemas import MealHistoryCreate, MealHistoryUpdate
from domain.schemas.source_schemas import (
    SourceCreate,
    SourceUpdate,
    SourceMergeRequest,
    SourceMergeResult,
)
from domain.schemas.tag_schemas import (
    TagCreate,
    TagUpdate,
    CuisineMigrationResult,
    CuisineMigrationStatus,
)
from domain.schemas.profile_schemas import ProfileUpdate
from domain.schemas.stats_schemas import (
    MostCooked,
    RecentlyCooked,
    StatsData,
    SuggestionCategory,
)
from domain.schemas.data_transfer_schemas import (
    ExportData,
    ImportValidationResult,
    ImportResult,
    CsvSource,
    CsvRow,
    CsvImportRequest,
    CsvImportResult,
    ClearDataResult,
)

__all__ = [
    # Entities
    "CamelModel",
    "DishEntity",
    "Dish",
    "MealHistory",
    "MealHistoryWithDish",
    "Source",
    "Tag",
    "Profile",
    # Requests
    "DishCreate",
    "DishUpdate",
    "DishTagsUpdate",
    "MealHistoryCreate",
    "MealHistoryUpdate",
    "SourceCreate",
    "SourceUpdate",
    "SourceMergeRequest",
    "SourceMergeResult",
    "TagCreate",
    "TagUpdate",
    "CuisineMigrationResult",
    "CuisineMigrationStatus",
    "ProfileUpdate",
    # Stats
    "MostCooked",
    "RecentlyCooked",
    "StatsData",
    "SuggestionCategory",
    # Data transfer
    "ExportData",
    "ImportValidationResult",
    "ImportResult",
    "CsvSource",
    "CsvRow",
    "CsvImportRequest",
    "CsvImportResult",
    "ClearDataResult",
]
