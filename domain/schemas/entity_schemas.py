"""
Application entity models.

Field names are snake_case in Python and camelCase on the wire
(``createdAt``, ``dishId``, ``userId`` ...). Either form is accepted on input.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.enums import SourceType, TagCategory


class CamelModel(BaseModel):
    """Base for models serialized with camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class DishEntity(CamelModel):
    """Dish as stored"""

    id: UUID
    name: str
    created_at: Optional[datetime] = None
    cuisines: List[str] = Field(default_factory=list)
    source_id: Optional[UUID] = None
    location: Optional[str] = None
    user_id: UUID
    tags: List[str] = Field(default_factory=list)


class Dish(DishEntity):
    """Dish with fields computed from its cooking history"""

    last_made: Optional[datetime] = None
    times_cooked: int = 0
    last_comment: Optional[str] = None


class MealHistory(CamelModel):
    id: UUID
    dish_id: UUID
    date: datetime
    notes: Optional[str] = None
    user_id: UUID


class MealHistoryWithDish(MealHistory):
    dish: Optional[Dish] = None


class Source(CamelModel):
    id: UUID
    name: str
    type: SourceType
    description: Optional[str] = None
    url: Optional[str] = None
    created_at: Optional[datetime] = None
    user_id: UUID


class Tag(CamelModel):
    id: UUID
    name: str
    category: TagCategory = TagCategory.GENERAL
    color: Optional[str] = None
    description: Optional[str] = None
    user_id: UUID
    created_at: Optional[datetime] = None


class Profile(CamelModel):
    id: UUID
    username: Optional[str] = None
    avatar_url: Optional[str] = None
    cuisines: Optional[List[str]] = None
    updated_at: Optional[datetime] = None
