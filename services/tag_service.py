from typing import Dict, List, Optional
from uuid import UUID
import logging
import uuid

from sqlalchemy.orm import Session

from app.exceptions import ConflictError, NotFoundError, ServiceValidationError
from domain.constants import CUISINE_TAG_COLORS, DEFAULT_TAG_COLOR, KNOWN_CUISINES
from domain.enums import TagCategory
from domain.mappers import map_array_from_db, map_tag_from_db, map_tag_to_db
from domain.models import Tag as TagModel, row_to_dict
from domain.schemas import (
    CuisineMigrationResult,
    CuisineMigrationStatus,
    Tag,
    TagCreate,
    TagUpdate,
)
from domain.validation import ValidationError, validate_tag
from repositories import DishRepository, ProfileRepository, TagRepository

logger = logging.getLogger("mealtracker.tags")


class TagService:
    """Business logic for tags"""

    @staticmethod
    def list_tags(
        db: Session, user_id: UUID, category: Optional[TagCategory] = None
    ) -> List[Tag]:
        category_value = category.value if category else None
        return map_array_from_db.tags(
            TagRepository(db).list_for_user(user_id, category_value)
        )

    @staticmethod
    def create_tag(db: Session, user_id: UUID, data: TagCreate) -> Tag:
        repo = TagRepository(db)
        name = data.name.strip()
        if repo.find_by_name(user_id, name):
            raise ConflictError(f"A tag named '{name}' already exists")

        row = map_tag_to_db(
            {**data.model_dump(), "name": name, "id": uuid.uuid4(), "user_id": user_id}
        )
        validate_tag(row)

        tag = repo.create(TagModel(**row))
        logger.info(f"tag_created tag_id={tag.id} user_id={user_id}")
        return map_tag_from_db(tag)

    @staticmethod
    def update_tag(db: Session, user_id: UUID, tag_id: UUID, data: TagUpdate) -> Tag:
        repo = TagRepository(db)
        tag = TagService._get_owned(db, user_id, tag_id)

        changes = data.model_dump(exclude_unset=True)
        if "name" in changes:
            if not changes["name"] or not changes["name"].strip():
                raise ServiceValidationError("Tag name cannot be empty")
            changes["name"] = changes["name"].strip()
            existing = repo.find_by_name(user_id, changes["name"])
            if existing and existing.id != tag_id:
                raise ConflictError(f"A tag named '{changes['name']}' already exists")
        if "category" in changes and changes["category"] is None:
            changes.pop("category")

        row = {**row_to_dict(tag), **map_tag_to_db({**changes, "id": tag_id})}
        validate_tag(row)
        for column, value in row.items():
            setattr(tag, column, value)

        repo.update(tag)
        logger.info(f"tag_updated tag_id={tag_id} user_id={user_id}")
        return map_tag_from_db(tag)

    @staticmethod
    def delete_tag(db: Session, user_id: UUID, tag_id: UUID) -> None:
        """Delete a tag and detach it from every dish"""
        tag = TagService._get_owned(db, user_id, tag_id)
        db.delete(tag)
        db.commit()
        logger.info(f"tag_deleted tag_id={tag_id} user_id={user_id}")

    @staticmethod
    def cuisine_migration_status(db: Session, user_id: UUID) -> CuisineMigrationStatus:
        """Whether the user still has no cuisine tags"""
        count = len(TagRepository(db).list_for_user(user_id, TagCategory.CUISINE.value))
        return CuisineMigrationStatus(needs_migration=count == 0, cuisine_tag_count=count)

    @staticmethod
    def migrate_cuisines_to_tags(db: Session, user_id: UUID) -> CuisineMigrationResult:
        """
        Turn dish cuisines into cuisine tags.

        A cuisine tag is created for every cuisine found on the user's dishes
        or profile (every known cuisine when there are none). A tag that
        already carries the name is reused whatever its category. Each dish
        is then linked to the tags of its cuisines; existing links are kept,
        so running it again only adds what is missing.
        """
        tag_repo = TagRepository(db)
        dishes = DishRepository(db).list_with_tags(user_id)
        profile = ProfileRepository(db).get_by_id(user_id)

        cuisines: Dict[str, str] = {}
        cuisine_lists = [dish.cuisines for dish in dishes]
        cuisine_lists.append(profile.cuisines if profile else None)
        for names in cuisine_lists:
            if not isinstance(names, list):
                continue
            for name in names:
                if isinstance(name, str) and name.strip():
                    cuisines.setdefault(name.strip().lower(), name.strip())
        if not cuisines:
            cuisines = {name.lower(): name for name in KNOWN_CUISINES}

        result = CuisineMigrationResult()
        try:
            tags: Dict[str, TagModel] = {}
            for key, name in cuisines.items():
                tag = tag_repo.find_by_name(user_id, name)
                if tag is None:
                    row = map_tag_to_db(
                        {
                            "id": uuid.uuid4(),
                            "name": name,
                            "category": TagCategory.CUISINE,
                            "color": CUISINE_TAG_COLORS.get(name, DEFAULT_TAG_COLOR),
                            "user_id": user_id,
                        }
                    )
                    try:
                        validate_tag(row)
                    except ValidationError as exc:
                        logger.warning(
                            f"cuisine_tag_skipped user_id={user_id} cuisine={name} reason={exc.message}"
                        )
                        continue
                    tag = TagModel(**row)
                    db.add(tag)
                    db.flush()
                    result.cuisine_tags_created += 1
                tags[key] = tag

            for dish in dishes:
                linked = {tag.id for tag in dish.tags}
                added = 0
                for name in dish.cuisines if isinstance(dish.cuisines, list) else []:
                    tag = tags.get(name.strip().lower()) if isinstance(name, str) else None
                    if tag is not None and tag.id not in linked:
                        dish.tags.append(tag)
                        linked.add(tag.id)
                        added += 1
                if added:
                    result.dishes_updated += 1
                    result.dish_tag_relations_created += added
            db.commit()
        except Exception:
            db.rollback()
            logger.exception(f"cuisine_migration_failed user_id={user_id}")
            raise

        logger.info(
            f"cuisine_migration_completed user_id={user_id} "
            f"tags_created={result.cuisine_tags_created} "
            f"dishes_updated={result.dishes_updated} "
            f"links_created={result.dish_tag_relations_created}"
        )
        return result

    @staticmethod
    def _get_owned(db: Session, user_id: UUID, tag_id: UUID) -> TagModel:
        tag = TagRepository(db).get_owned(tag_id, user_id)
        if not tag:
            raise NotFoundError(f"Tag {tag_id} not found")
        return tag
