"""Dish routes: CRUD, filtering, sorting and tagging"""

from typing import List, Optional
from uuid import UUID
import logging

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from api.dependencies import get_current_user_id
from domain.models import get_db_session
from domain.schemas import Dish, DishCreate, DishTagsUpdate, DishUpdate
from services.dish_service import DishService

router = APIRouter(prefix="/dishes", tags=["Dishes"])
logger = logging.getLogger("mealtracker.api.dishes")


@router.get("", response_model=List[Dish])
def list_dishes(
    search: Optional[str] = Query(None, description="Match on name or cuisine"),
    cuisines: Optional[List[str]] = Query(None),
    source_id: Optional[UUID] = Query(None, alias="sourceId"),
    tag_id: Optional[UUID] = Query(None, alias="tagId"),
    sort_by: Optional[str] = Query(
        None,
        alias="sortBy",
        description="name, lastCooked, timesCooked, cuisine or lastComment; prefix asc_ to reverse",
    ),
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """List the caller's dishes with cooking statistics"""
    return DishService.list_dishes(
        db,
        user_id,
        search=search,
        cuisines=cuisines,
        source_id=source_id,
        tag_id=tag_id,
        sort_by=sort_by,
    )


@router.post("", response_model=Dish, status_code=status.HTTP_201_CREATED)
def create_dish(
    payload: DishCreate,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    return DishService.create_dish(db, user_id, payload)


@router.get("/{dish_id}", response_model=Dish)
def get_dish(
    dish_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    return DishService.get_dish(db, user_id, dish_id)


@router.patch("/{dish_id}", response_model=Dish)
def update_dish(
    dish_id: UUID,
    payload: DishUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """Update the provided fields of a dish"""
    return DishService.update_dish(db, user_id, dish_id, payload)


@router.delete("/{dish_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_dish(
    dish_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    """Delete a dish and its cooking history"""
    DishService.delete_dish(db, user_id, dish_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{dish_id}/tags", response_model=Dish)
def set_dish_tags(
    dish_id: UUID,
    payload: DishTagsUpdate,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    return DishService.set_tags(db, user_id, dish_id, payload.tag_ids)


@router.post("/{dish_id}/tags/{tag_id}", response_model=Dish)
def add_dish_tag(
    dish_id: UUID,
    tag_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    return DishService.add_tag(db, user_id, dish_id, tag_id)


@router.delete("/{dish_id}/tags/{tag_id}", response_model=Dish)
def remove_dish_tag(
    dish_id: UUID,
    tag_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db_session),
):
    return DishService.remove_tag(db, user_id, dish_id, tag_id)
