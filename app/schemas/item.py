# app/schemas/item.py
import math
import uuid
from typing import Any, Mapping

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.models.item import ItemCategory

# Prices are entered with a 0.01 step
PRICE_STEP_TOLERANCE = 1e-9


def _check_price_step(v: float) -> float:
    if not math.isfinite(v):
        raise ValueError("price must be a finite number")
    if abs(round(v, 2) - v) > PRICE_STEP_TOLERANCE:
        raise ValueError("price must have at most two decimals")
    return round(v, 2)


def _check_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("name cannot be empty")
    return v


class ItemCreate(SQLModel):
    """
    Payload for creating a menu item.

    - id is generated by the database.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    price: float = Field(ge=0)
    category: ItemCategory
    is_active: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: float) -> float:
        return _check_price_step(v)


class ItemUpdate(SQLModel):
    """
    Partial update payload for items.
    All fields are optional; id is never updatable.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    price: float | None = Field(default=None, ge=0)
    category: ItemCategory | None = None
    is_active: bool | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _check_name(v)

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: float | None) -> float | None:
        if v is None:
            return v
        return _check_price_step(v)


class ItemRead(SQLModel):
    """
    Item representation for clients.
    """

    id: uuid.UUID
    name: str
    price: float
    category: ItemCategory
    is_active: bool


class ItemForm(ItemCreate):
    """
    Item create/edit form as submitted by the items screen.

    Form values arrive as strings:
      - id        : hidden input, only present when editing
      - is_active : checkbox, "on" when checked, absent otherwise
    """

    id: uuid.UUID | None = None

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "ItemForm":
        raw_id = form.get("id")
        raw_price = form.get("price")
        return cls(
            id=raw_id or None,
            name=form.get("name") or "",
            price=raw_price if raw_price not in (None, "") else None,
            category=form.get("category") or None,
            is_active=form.get("is_active") in ("on", True, "true"),
        )

    def to_create(self) -> ItemCreate:
        return ItemCreate(**self.model_dump(exclude={"id"}))

    def to_update(self) -> ItemUpdate:
        return ItemUpdate(**self.model_dump(exclude={"id"}))
