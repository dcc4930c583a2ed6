"""
Tag model.
"""

from sqlalchemy import Column, String, Text, TIMESTAMP, Uuid
from sqlalchemy.orm import relationship
import uuid

from domain.constants import TAG_NAME_MAX_LENGTH, TAG_DESCRIPTION_MAX_LENGTH
from domain.dates import utcnow
from domain.enums import TagCategory
from domain.models.database import Base
from domain.models.dish import dish_tags


class Tag(Base):
    """User-defined label attached to dishes"""

    __tablename__ = "tags"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(TAG_NAME_MAX_LENGTH), nullable=False)
    category = Column(Text, nullable=False, default=TagCategory.GENERAL.value)
    color = Column(Text)
    description = Column(String(TAG_DESCRIPTION_MAX_LENGTH))
    user_id = Column(Uuid, nullable=False, index=True)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)

    dishes = relationship("Dish", secondary=dish_tags, back_populates="tags")
