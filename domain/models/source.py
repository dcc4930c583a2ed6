"""
Recipe source model (cookbooks and websites).
"""

from sqlalchemy import Column, String, Text, TIMESTAMP, Uuid
from sqlalchemy.orm import relationship
import uuid

from domain.constants import (
    SOURCE_NAME_MAX_LENGTH,
    SOURCE_DESCRIPTION_MAX_LENGTH,
    SOURCE_URL_MAX_LENGTH,
)
from domain.dates import utcnow
from domain.enums import SourceType
from domain.models.database import Base


class Source(Base):
    """Book or website a recipe comes from"""

    __tablename__ = "sources"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(SOURCE_NAME_MAX_LENGTH), nullable=False)
    # stored as text so legacy values ("document") survive until mapped
    type = Column(Text, nullable=False, default=SourceType.BOOK.value)
    description = Column(String(SOURCE_DESCRIPTION_MAX_LENGTH))
    url = Column(String(SOURCE_URL_MAX_LENGTH))
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow)
    user_id = Column(Uuid, nullable=False, index=True)

    dishes = relationship("Dish", back_populates="source")
