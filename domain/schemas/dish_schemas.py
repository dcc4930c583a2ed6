"""Schemas for dish requests"""

from typing import List, Optional
from uuid import UUID

from pydantic import Field

from domain.constants import DISH_NAME_MAX_LENGTH, DISH_LOCATION_MAX_LENGTH
from domain.schemas.entity_schemas import CamelModel


class DishCreate(CamelModel):
    """Schema for creating a dish"""

    name: str = Field(..., min_length=1, max_length=DISH_NAME_MAX_LENGTH)
    cuisines: Optional[List[str]] = Field(
        None, description="Cuisine names; defaults to ['Other']"
    )
    source_id: Optional[UUID] = None
    location: Optional[str] = Field(
        None,
        max_length=DISH_LOCATION_MAX_LENGTH,
        description="Page number, chapter or other location within the source",
    )
    tag_ids: Optional[List[UUID]] = None


class DishUpdate(CamelModel):
    """Partial dish update; only provided fields are changed"""

    name: Optional[str] = Field(None, min_length=1, max_length=DISH_NAME_MAX_LENGTH)
    cuisines: Optional[List[str]] = None
    source_id: Optional[UUID] = None
    location: Optional[str] = Field(None, max_length=DISH_LOCATION_MAX_LENGTH)


class DishTagsUpdate(CamelModel):
    """Replace the full set of tags on a dish"""

    tag_ids: List[UUID] = Field(default_factory=list)
