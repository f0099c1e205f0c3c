# app/models/item.py
import math
import uuid
from typing import Literal

from pydantic import field_validator
from sqlmodel import SQLModel, Field

ItemCategory = Literal["food", "drink"]

ITEM_CATEGORIES: tuple[str, ...] = ("food", "drink")


class Item(SQLModel):
    """
    Menu item row in the Supabase `items` table.

    The table itself is owned by Supabase (migrations live there); this
    model only mirrors the columns we read and write.

      - id, name, price, category, is_active

    Deleting an item is a soft delete: `is_active` flips to False and the
    row stays in place.
    """

    id: uuid.UUID = Field(
        description="Primary key, generated by the database; immutable",
    )

    name: str = Field(
        min_length=1,
        max_length=100,
        description="Display name on the menu / POS",
    )

    price: float = Field(
        ge=0,
        description="Unit price (RM), two decimals",
    )

    category: ItemCategory = Field(
        description="food | drink",
    )

    is_active: bool = Field(
        default=True,
        description="False once the item has been (soft) deleted or hidden",
    )

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError("price must be a finite number")
        return v
