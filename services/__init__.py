"""Services package - Business logic layer"""

from services.dish_service import DishService
from services.meal_history_service import MealHistoryService
from services.source_service import SourceService
from services.tag_service import TagService
from services.profile_service import ProfileService
from services.stats_service import StatsService
from services.suggestion_service import SuggestionService
from services.data_transfer_service import DataTransferService
from services.csv_import_service import CsvImportService

__all__ = [
    "DishService",
    "MealHistoryService",
    "SourceService",
    "TagService",
    "ProfileService",
    "StatsService",
    "SuggestionService",
    "DataTransferService",
    "CsvImportService",
]
