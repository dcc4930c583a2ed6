"""
Dish and dish/tag link models.
"""

from sqlalchemy import Column, String, TIMESTAMP, ForeignKey, Table, JSON, Uuid
from sqlalchemy.orm import relationship
import uuid

from domain.constants import DISH_NAME_MAX_LENGTH, DISH_LOCATION_MAX_LENGTH
from domain.dates import utcnow
from domain.models.database import Base


dish_tags = Table(
    "dish_tags",
    Base.metadata,
    Column(
        "dish_id",
        Uuid,
        ForeignKey("dishes.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        Uuid,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Dish(Base):
    """A dish the user cooks"""

    __tablename__ = "dishes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(DISH_NAME_MAX_LENGTH), nullable=False)
    createdat = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    cuisines = Column(JSON, nullable=False, default=list)
    source_id = Column(
        Uuid, ForeignKey("sources.id", ondelete="SET NULL"), nullable=True
    )
    location = Column(String(DISH_LOCATION_MAX_LENGTH))
    user_id = Column(Uuid, nullable=False, index=True)

    source = relationship("Source", back_populates="dishes")
    meal_history = relationship(
        "MealHistory",
        back_populates="dish",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    tags = relationship(
        "Tag", secondary=dish_tags, back_populates="dishes", order_by="Tag.name"
    )
