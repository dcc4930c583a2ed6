"""
Repositories package - Data access layer.
"""

from repositories.base import BaseRepository
from repositories.dish_repository import DishRepository
from repositories.meal_history_repository import MealHistoryRepository
from repositories.source_repository import SourceRepository
from repositories.tag_repository import TagRepository
from repositories.profile_repository import ProfileRepository

__all__ = [
    "BaseRepository",
    "DishRepository",
    "MealHistoryRepository",
    "SourceRepository",
    "TagRepository",
    "ProfileRepository",
]
