# app/repositories/item_repo.py
import uuid
from typing import Any

from app.core.config import get_settings
from app.core.supabase_client import SupabaseSession
from app.models.item import Item

settings = get_settings()


class ItemRepository:
    """
    Data access layer for Item.

    - Pure PostgREST operations through the caller's Supabase session
      (so row level security applies per user).
    - No FastAPI, no business logic.
    - Rows are never physically deleted.
    """

    def __init__(self, table: str = settings.ITEMS_TABLE):
        self.table = table

    def get_by_id(self, session: SupabaseSession, item_id: uuid.UUID) -> Item | None:
        response = (
            session.table(self.table)
            .select("*")
            .eq("id", str(item_id))
            .limit(1)
            .execute()
        )
        rows = response.data or []
        return Item.model_validate(rows[0]) if rows else None

    def list(self, session: SupabaseSession) -> list[Item]:
        """Every item, active and inactive, ordered by name."""
        response = session.table(self.table).select("*").order("name").execute()
        return [Item.model_validate(row) for row in response.data or []]

    def create(self, session: SupabaseSession, values: dict[str, Any]) -> Item:
        response = session.table(self.table).insert(values).execute()
        return Item.model_validate(response.data[0])

    def update(
        self,
        session: SupabaseSession,
        item_id: uuid.UUID,
        values: dict[str, Any],
    ) -> Item | None:
        response = (
            session.table(self.table)
            .update(values)
            .eq("id", str(item_id))
            .execute()
        )
        rows = response.data or []
        return Item.model_validate(rows[0]) if rows else None

    def soft_delete(self, session: SupabaseSession, item_id: uuid.UUID) -> Item | None:
        return self.update(session, item_id, {"is_active": False})
