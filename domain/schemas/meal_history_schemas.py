"""Schemas for cooking history requests"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from domain.constants import MEAL_HISTORY_NOTES_MAX_LENGTH
from domain.schemas.entity_schemas import CamelModel


class MealHistoryCreate(CamelModel):
    """Record a dish as cooked"""

    dish_id: UUID
    date: datetime = Field(..., description="When the dish was cooked")
    notes: Optional[str] = Field(None, max_length=MEAL_HISTORY_NOTES_MAX_LENGTH)


class MealHistoryUpdate(CamelModel):
    date: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=MEAL_HISTORY_NOTES_MAX_LENGTH)
