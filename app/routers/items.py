# app/routers/items.py
import uuid
from typing import Literal

from fastapi import APIRouter, Depends, status

from app.core.auth import get_auth_session, require_company_admin
from app.core.supabase_client import SupabaseSession
from app.repositories.item_repo import ItemRepository
from app.schemas.item import ItemCreate, ItemRead, ItemUpdate
from app.services.item_service import ItemService

router = APIRouter(
    prefix="/items",
    tags=["Items"],
    dependencies=[Depends(require_company_admin)],
)

repo = ItemRepository()
service = ItemService(repo)


@router.get("", response_model=list[ItemRead])
def list_items(
    session: SupabaseSession = Depends(get_auth_session),
    search: str = "",
    category: Literal["all", "food", "drink"] = "all",
):
    """
    List menu items, active and inactive.

    - `search`: case-insensitive substring of the name.
    - `category`: all | food | drink.
    - No pagination.
    """
    return service.list_items(session, search, category)


@router.get("/{item_id}", response_model=ItemRead)
def get_item(
    item_id: uuid.UUID,
    session: SupabaseSession = Depends(get_auth_session),
):
    return service.get_item(session, item_id)


@router.post("", response_model=ItemRead, status_code=status.HTTP_201_CREATED)
def create_item(
    payload: ItemCreate,
    session: SupabaseSession = Depends(get_auth_session),
):
    """
    Create a new item. The id is generated by the database.
    """
    return service.create_item(session, payload)


@router.patch("/{item_id}", response_model=ItemRead)
def update_item(
    item_id: uuid.UUID,
    payload: ItemUpdate,
    session: SupabaseSession = Depends(get_auth_session),
):
    """
    Update an existing item (partial).
    """
    return service.update_item(session, item_id, payload)


@router.delete("/{item_id}", response_model=ItemRead)
def delete_item(
    item_id: uuid.UUID,
    session: SupabaseSession = Depends(get_auth_session),
):
    """
    Soft delete an item: it is marked inactive, the row is kept.
    """
    return service.delete_item(session, item_id)
