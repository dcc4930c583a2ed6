"""
Cooking history model.
"""

from sqlalchemy import Column, String, TIMESTAMP, ForeignKey, Uuid
from sqlalchemy.orm import relationship
import uuid

from domain.constants import MEAL_HISTORY_NOTES_MAX_LENGTH
from domain.dates import utcnow
from domain.models.database import Base


class MealHistory(Base):
    """One record of a dish having been cooked"""

    __tablename__ = "meal_history"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # no underscore: the column predates the naming convention
    dishid = Column(
        Uuid, ForeignKey("dishes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    notes = Column(String(MEAL_HISTORY_NOTES_MAX_LENGTH))
    user_id = Column(Uuid, nullable=False, index=True)

    dish = relationship("Dish", back_populates="meal_history")
