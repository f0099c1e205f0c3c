# app/services/item_service.py
import logging
import uuid
from contextlib import contextmanager
from typing import Iterable, Iterator, Protocol

from fastapi import HTTPException, status
from postgrest.exceptions import APIError

from app.core.supabase_client import SupabaseSession
from app.models.item import Item
from app.repositories.item_repo import ItemRepository
from app.schemas.item import ItemCreate, ItemUpdate

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"


class _Named(Protocol):
    name: str
    category: str


def filter_items(
    items: Iterable[_Named],
    search_term: str = "",
    category_filter: str | None = ALL_CATEGORIES,
) -> list:
    """
    Case-insensitive substring match on name + exact category match.

    `category_filter` of None or "all" keeps every category.
    """
    needle = (search_term or "").lower()
    return [
        item
        for item in items
        if needle in item.name.lower()
        and (category_filter in (None, ALL_CATEGORIES) or item.category == category_filter)
    ]


@contextmanager
def _database_errors(action: str) -> Iterator[None]:
    """Map PostgREST failures to 502; nothing is retried."""
    try:
        yield
    except APIError as e:
        logger.error(f"Failed to {action} item: {e.message}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to {action} item",
        )


class ItemService:
    """
    Business logic for menu items.

    Responsibilities:
      - not-found handling
      - soft delete (flag flip, never a row delete)
      - search / category filtering
      - company-admin only (enforced at router via require_company_admin)
    """

    def __init__(self, repo: ItemRepository):
        self.repo = repo

    def list_items(
        self,
        session: SupabaseSession,
        search: str = "",
        category: str | None = None,
    ) -> list[Item]:
        with _database_errors("load"):
            items = self.repo.list(session)
        return filter_items(items, search, category)

    def get_item(self, session: SupabaseSession, item_id: uuid.UUID) -> Item:
        with _database_errors("load"):
            item = self.repo.get_by_id(session, item_id)
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not found",
            )
        return item

    def create_item(self, session: SupabaseSession, payload: ItemCreate) -> Item:
        with _database_errors("create"):
            return self.repo.create(session, payload.model_dump())

    def update_item(
        self,
        session: SupabaseSession,
        item_id: uuid.UUID,
        payload: ItemUpdate,
    ) -> Item:
        """
        Partial update of an item; only fields that were sent are written.
        """
        values = payload.model_dump(exclude_unset=True, exclude_none=True)
        if not values:
            return self.get_item(session, item_id)

        with _database_errors("update"):
            item = self.repo.update(session, item_id, values)
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not found",
            )
        return item

    def delete_item(self, session: SupabaseSession, item_id: uuid.UUID) -> Item:
        """
        Soft delete: mark the item inactive and keep the row.
        """
        with _database_errors("delete"):
            item = self.repo.soft_delete(session, item_id)
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not found",
            )
        return item
