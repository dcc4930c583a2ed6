"""
Base repository interface for data access layer.
This follows the Repository pattern to separate business logic from data access.
"""

from typing import Any, Dict, Generic, TypeVar, Optional, List, Type
from uuid import UUID
from sqlalchemy.orm import Session
from abc import ABC

from app.exceptions import ConflictError

ModelType = TypeVar("ModelType")


class BaseRepository(Generic[ModelType], ABC):
    """
    Base repository providing common CRUD operations.
    All repositories should inherit from this class.

    Every model handled here has a UUID ``id`` primary key and, apart from
    profiles, a ``user_id`` owner column. The ``*_for_user`` helpers scope
    reads and deletes to a single owner.
    """

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def get_by_id(self, entity_id: UUID) -> Optional[ModelType]:
        """Get entity by primary key"""
        return self.db.get(self.model, entity_id)

    def get_owned(self, entity_id: UUID, user_id: UUID) -> Optional[ModelType]:
        """Get entity by ID only if it belongs to ``user_id``"""
        return (
            self.db.query(self.model)
            .filter(self.model.id == entity_id, self.model.user_id == user_id)
            .first()
        )

    def page_for_user(
        self, user_id: UUID, after_id: Optional[UUID] = None, limit: int = 1000
    ) -> List[ModelType]:
        """
        Keyset page of a user's rows ordered by ``id``.

        Pass the last id of the previous page as ``after_id`` to continue.
        """
        query = self.db.query(self.model).filter(self.model.user_id == user_id)
        if after_id is not None:
            query = query.filter(self.model.id > after_id)
        return query.order_by(self.model.id).limit(limit).all()

    def create(self, entity: ModelType) -> ModelType:
        """Create new entity"""
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def update(self, entity: ModelType) -> ModelType:
        """Update existing entity"""
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity_id: UUID) -> bool:
        """Delete entity by ID"""
        entity = self.get_by_id(entity_id)
        if entity:
            self.db.delete(entity)
            self.db.commit()
            return True
        return False

    def upsert(self, values: Dict[str, Any], user_id: UUID) -> ModelType:
        """
        Insert or update a row by primary key without committing.

        Raises ConflictError when the id is already taken by another user.
        """
        existing = self.get_by_id(values["id"])
        if existing is None:
            entity = self.model(**values)
            self.db.add(entity)
            return entity

        if getattr(existing, "user_id", user_id) != user_id:
            raise ConflictError(
                f"{self.model.__name__} {values['id']} belongs to another user"
            )
        for key, value in values.items():
            setattr(existing, key, value)
        return existing

    def delete_for_user(self, user_id: UUID) -> int:
        """Bulk delete every row owned by ``user_id`` (no commit)"""
        return (
            self.db.query(self.model)
            .filter(self.model.user_id == user_id)
            .delete(synchronize_session="fetch")
        )
