"""
Tag Repository - Data access layer for tags
"""

from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from domain.models import Tag


class TagRepository(BaseRepository[Tag]):
    """Repository for tag data access"""

    def __init__(self, db: Session):
        super().__init__(db, Tag)

    def list_for_user(self, user_id: UUID, category: Optional[str] = None) -> List[Tag]:
        query = self.db.query(Tag).filter(Tag.user_id == user_id)
        if category:
            query = query.filter(Tag.category == category)
        return query.order_by(Tag.name).all()

    def find_by_name(self, user_id: UUID, name: str) -> Optional[Tag]:
        """Case-insensitive lookup by name"""
        return (
            self.db.query(Tag)
            .filter(Tag.user_id == user_id, func.lower(Tag.name) == name.lower())
            .first()
        )

    def get_many_owned(self, tag_ids: Iterable[UUID], user_id: UUID) -> List[Tag]:
        ids = list(tag_ids)
        if not ids:
            return []
        return (
            self.db.query(Tag)
            .filter(Tag.id.in_(ids), Tag.user_id == user_id)
            .order_by(Tag.name)
            .all()
        )
