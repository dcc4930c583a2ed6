from typing import List
from uuid import UUID
import logging
import uuid

from sqlalchemy.orm import Session

from app.exceptions import NotFoundError, ServiceValidationError
from domain.mappers import (
    map_array_from_db,
    map_source_from_db,
    map_source_to_db,
)
from domain.models import Source as SourceModel, row_to_dict
from domain.schemas import (
    Dish,
    Source,
    SourceCreate,
    SourceMergeResult,
    SourceUpdate,
)
from domain.validation import validate_source
from repositories import DishRepository, SourceRepository

logger = logging.getLogger("mealtracker.sources")


class SourceService:
    """Business logic for recipe sources (cookbooks and websites)"""

    @staticmethod
    def list_sources(db: Session, user_id: UUID) -> List[Source]:
        return map_array_from_db.sources(SourceRepository(db).list_for_user(user_id))

    @staticmethod
    def get_source(db: Session, user_id: UUID, source_id: UUID) -> Source:
        return map_source_from_db(SourceService._get_owned(db, user_id, source_id))

    @staticmethod
    def create_source(db: Session, user_id: UUID, data: SourceCreate) -> Source:
        row = map_source_to_db(
            {**data.model_dump(), "id": uuid.uuid4(), "user_id": user_id}
        )
        validate_source(row)

        source = SourceRepository(db).create(SourceModel(**row))
        logger.info(f"source_created source_id={source.id} user_id={user_id}")
        return map_source_from_db(source)

    @staticmethod
    def update_source(
        db: Session, user_id: UUID, source_id: UUID, data: SourceUpdate
    ) -> Source:
        repo = SourceRepository(db)
        source = SourceService._get_owned(db, user_id, source_id)

        changes = data.model_dump(exclude_unset=True)
        for required in ("name", "type"):
            if required in changes and not changes[required]:
                raise ServiceValidationError(f"Source {required} cannot be empty")

        row = {**row_to_dict(source), **map_source_to_db({**changes, "id": source_id})}
        validate_source(row)
        for column, value in row.items():
            setattr(source, column, value)

        repo.update(source)
        logger.info(f"source_updated source_id={source_id} user_id={user_id}")
        return map_source_from_db(source)

    @staticmethod
    def delete_source(db: Session, user_id: UUID, source_id: UUID) -> None:
        """Delete a source; dishes that referenced it keep existing without one"""
        source = SourceService._get_owned(db, user_id, source_id)
        unlinked = DishRepository(db).unlink_source(source_id)
        db.delete(source)
        db.commit()
        logger.info(
            f"source_deleted source_id={source_id} user_id={user_id} unlinked_dishes={unlinked}"
        )

    @staticmethod
    def list_dishes(db: Session, user_id: UUID, source_id: UUID) -> List[Dish]:
        SourceService._get_owned(db, user_id, source_id)
        rows = DishRepository(db).summaries(user_id, source_id=source_id)
        dishes = map_array_from_db.dish_summaries(rows)
        return sorted(dishes, key=lambda d: d.name.lower())

    @staticmethod
    def merge_sources(
        db: Session, user_id: UUID, source_to_merge_id: UUID, target_source_id: UUID
    ) -> SourceMergeResult:
        """
        Merge one source into another.

        Every dish pointing at ``source_to_merge_id`` is re-pointed at
        ``target_source_id`` and the merged source is deleted, in one
        transaction.
        """
        if source_to_merge_id == target_source_id:
            raise ServiceValidationError("Cannot merge a source into itself")

        source = SourceService._get_owned(db, user_id, source_to_merge_id)
        SourceService._get_owned(db, user_id, target_source_id)

        try:
            affected = DishRepository(db).reassign_source(
                source_to_merge_id, target_source_id
            )
            db.delete(source)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception(
                f"source_merge_failed source_id={source_to_merge_id} target_id={target_source_id}"
            )
            raise

        logger.info(
            f"sources_merged source_id={source_to_merge_id} "
            f"target_id={target_source_id} affected_dishes={affected}"
        )
        return SourceMergeResult(
            source_to_merge_id=source_to_merge_id,
            target_source_id=target_source_id,
            affected_dishes_count=affected,
        )

    @staticmethod
    def _get_owned(db: Session, user_id: UUID, source_id: UUID) -> SourceModel:
        source = SourceRepository(db).get_owned(source_id, user_id)
        if not source:
            raise NotFoundError(f"Source {source_id} not found")
        return source
