"""
Shared test fixtures and factories for the MealTracker test suite.

Database tests run against the in-memory SQLite engine configured in
conftest.py; every test gets freshly created tables.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Generator, Iterable, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.config import settings
from domain.models import Base, SessionLocal, engine, get_db_session, init_database
from domain.models import Dish, MealHistory, Source, Tag
from domain.schemas import Dish as DishEntity
from main import app


def days_ago(days: float, now: Optional[datetime] = None) -> datetime:
    return (now or datetime.now(timezone.utc)) - timedelta(days=days)


def auth_headers(user_id: uuid.UUID) -> dict:
    return {settings.user_id_header: str(user_id)}


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """
    Database session backed by fresh tables.

    Tables are created before the test and dropped afterwards so tests never
    see each other's rows.
    """
    init_database()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """TestClient whose requests share the test's database session"""

    def override_get_db_session():
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


# =============================================================================
# FACTORIES
# =============================================================================


def make_source(
    db: Session,
    user_id: uuid.UUID,
    name: str = "Salt Fat Acid Heat",
    type: str = "book",
    url: Optional[str] = None,
) -> Source:
    source = Source(name=name, type=type, url=url, user_id=user_id)
    db.add(source)
    db.commit()
    return source


def make_tag(
    db: Session, user_id: uuid.UUID, name: str = "Weeknight", category: str = "general"
) -> Tag:
    tag = Tag(name=name, category=category, user_id=user_id)
    db.add(tag)
    db.commit()
    return tag


def make_dish(
    db: Session,
    user_id: uuid.UUID,
    name: str = "Mapo Tofu",
    cuisines: Iterable[str] = ("Chinese",),
    source: Optional[Source] = None,
    location: Optional[str] = None,
    cooked: Iterable[datetime] = (),
    notes: Optional[str] = None,
) -> Dish:
    """Create a dish, optionally with history entries on the given dates"""
    dish = Dish(
        name=name,
        cuisines=list(cuisines),
        source_id=source.id if source else None,
        location=location,
        user_id=user_id,
    )
    db.add(dish)
    db.flush()
    for when in cooked:
        db.add(MealHistory(dishid=dish.id, date=when, notes=notes, user_id=user_id))
    db.commit()
    return dish


def make_dish_entity(
    name: str = "Mapo Tofu",
    cuisines: Iterable[str] = ("Chinese",),
    times_cooked: int = 0,
    last_made: Optional[datetime] = None,
    last_comment: Optional[str] = None,
    source_id: Optional[uuid.UUID] = None,
) -> DishEntity:
    """Dish entity with statistics, no database needed"""
    return DishEntity(
        id=uuid.uuid4(),
        name=name,
        cuisines=list(cuisines),
        user_id=uuid.uuid4(),
        source_id=source_id,
        times_cooked=times_cooked,
        last_made=last_made,
        last_comment=last_comment,
    )
