"""
Domain models package - SQLAlchemy ORM models.
"""

from domain.models.database import (
    Base,
    engine,
    SessionLocal,
    init_database,
    get_db_session,
    row_to_dict,
)
from domain.models.dish import Dish, dish_tags
from domain.models.meal_history import MealHistory
from domain.models.source import Source
from domain.models.tag import Tag
from domain.models.profile import Profile

__all__ = [
    # Database
    "Base",
    "engine",
    "SessionLocal",
    "init_database",
    "get_db_session",
    "row_to_dict",
    # Models
    "Dish",
    "dish_tags",
    "MealHistory",
    "Source",
    "Tag",
    "Profile",
]
