"""Schemas for tag requests"""

from typing import Optional

from pydantic import Field

from domain.constants import TAG_NAME_MAX_LENGTH, TAG_DESCRIPTION_MAX_LENGTH
from domain.enums import TagCategory
from domain.schemas.entity_schemas import CamelModel


class TagCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=TAG_NAME_MAX_LENGTH)
    category: TagCategory = TagCategory.GENERAL
    color: Optional[str] = None
    description: Optional[str] = Field(None, max_length=TAG_DESCRIPTION_MAX_LENGTH)


class TagUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=TAG_NAME_MAX_LENGTH)
    category: Optional[TagCategory] = None
    color: Optional[str] = None
    description: Optional[str] = Field(None, max_length=TAG_DESCRIPTION_MAX_LENGTH)


class CuisineMigrationResult(CamelModel):
    cuisine_tags_created: int = 0
    dishes_updated: int = 0
    dish_tag_relations_created: int = 0


class CuisineMigrationStatus(CamelModel):
    needs_migration: bool
    cuisine_tag_count: int
