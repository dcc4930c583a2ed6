"""
Domain mappers package.
Handles transformation between the database row format and application entities.
"""

from domain.mappers.type_mapping import (
    map_dish_from_db,
    map_dish_from_summary,
    map_dish_to_db,
    map_meal_history_from_db,
    map_meal_history_to_db,
    map_source_from_db,
    map_source_to_db,
    map_tag_from_db,
    map_tag_to_db,
    map_profile_from_db,
    map_profile_to_db,
    map_array_from_db,
)

__all__ = [
    "map_dish_from_db",
    "map_dish_from_summary",
    "map_dish_to_db",
    "map_meal_history_from_db",
    "map_meal_history_to_db",
    "map_source_from_db",
    "map_source_to_db",
    "map_tag_from_db",
    "map_tag_to_db",
    "map_profile_from_db",
    "map_profile_to_db",
    "map_array_from_db",
]
