"""API routes package"""

from . import health, dishes, meal_history, sources, tags, profile, stats, data

__all__ = [
    "health",
    "dishes",
    "meal_history",
    "sources",
    "tags",
    "profile",
    "stats",
    "data",
]
