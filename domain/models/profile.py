"""
User profile model.
"""

from sqlalchemy import Column, Text, TIMESTAMP, JSON, Uuid

from domain.dates import utcnow
from domain.models.database import Base


class Profile(Base):
    """Per-user settings; the id is the user's id"""

    __tablename__ = "profiles"

    id = Column(Uuid, primary_key=True)
    username = Column(Text)
    avatar_url = Column(Text)
    cuisines = Column(JSON)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow)
