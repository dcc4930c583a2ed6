"""Schemas for statistics and suggestions"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from domain.schemas.entity_schemas import CamelModel, Dish


class MostCooked(CamelModel):
    name: str
    times_cooked: int


class RecentlyCooked(CamelModel):
    date: datetime
    dish: Optional[Dish] = None
    notes: Optional[str] = None


class StatsData(CamelModel):
    """Aggregate statistics over a user's dishes and cooking history"""

    total_dishes: int
    total_times_cooked: int
    most_cooked: Optional[MostCooked] = None
    top_dishes: List[Dish] = Field(default_factory=list)
    cuisine_breakdown: Dict[str, int] = Field(default_factory=dict)
    recently_cooked: List[RecentlyCooked] = Field(default_factory=list)


class SuggestionCategory(CamelModel):
    id: str
    title: str
    description: str
    dishes: List[Dish] = Field(default_factory=list)
    empty_message: str
