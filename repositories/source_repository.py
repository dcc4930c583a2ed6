"""
Source Repository - Data access layer for recipe sources
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import Source


class SourceRepository(BaseRepository[Source]):
    """Repository for source data access"""

    def __init__(self, db: Session):
        super().__init__(db, Source)

    def list_for_user(self, user_id: UUID) -> List[Source]:
        return (
            self.db.query(Source)
            .filter(Source.user_id == user_id)
            .order_by(Source.name)
            .all()
        )

    def find_by_name(self, user_id: UUID, name: str) -> Optional[Source]:
        """Case-insensitive lookup by name"""
        return (
            self.db.query(Source)
            .filter(Source.user_id == user_id, func.lower(Source.name) == name.lower())
            .first()
        )
