"""Schemas for recipe source requests"""

from typing import Optional
from uuid import UUID

from pydantic import Field

from domain.constants import (
    SOURCE_NAME_MAX_LENGTH,
    SOURCE_DESCRIPTION_MAX_LENGTH,
    SOURCE_URL_MAX_LENGTH,
)
from domain.enums import SourceType
from domain.schemas.entity_schemas import CamelModel


class SourceCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=SOURCE_NAME_MAX_LENGTH)
    type: SourceType = SourceType.BOOK
    description: Optional[str] = Field(None, max_length=SOURCE_DESCRIPTION_MAX_LENGTH)
    url: Optional[str] = Field(None, max_length=SOURCE_URL_MAX_LENGTH)


class SourceUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=SOURCE_NAME_MAX_LENGTH)
    type: Optional[SourceType] = None
    description: Optional[str] = Field(None, max_length=SOURCE_DESCRIPTION_MAX_LENGTH)
    url: Optional[str] = Field(None, max_length=SOURCE_URL_MAX_LENGTH)


class SourceMergeRequest(CamelModel):
    """Merge the source in the path into ``target_source_id``"""

    target_source_id: UUID


class SourceMergeResult(CamelModel):
    source_to_merge_id: UUID
    target_source_id: UUID
    affected_dishes_count: int
