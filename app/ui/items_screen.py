# app/ui/items_screen.py
"""
Items management screen.

`ItemsScreen` holds the state behind the items page (list, filters, form
modal, delete confirmation, toasts) and drives an `ItemsGateway`:

  - load()            -> full reload of the collection
  - submit(form)      -> create or update, single-flight per form
  - request_delete(id) / confirm_delete() / cancel_delete()
                      -> soft delete after confirmation, one in-flight
                         flag per record

Writes are never applied locally: on success the whole list is reloaded,
on failure an error toast is shown and the list is left as it was.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Protocol

import httpx
from pydantic import ValidationError

from app.models.item import Item, ItemCategory
from app.schemas.item import ItemForm
from app.services.item_service import ALL_CATEGORIES, filter_items

logger = logging.getLogger(__name__)

ToastKind = Literal["success", "error"]
CategoryFilter = Literal["all", "food", "drink"]


@dataclass
class ActionResult:
    success: bool
    data: Any = None
    error: str | None = None


@dataclass
class Toast:
    kind: ToastKind
    message: str


class ItemsGateway(Protocol):
    async def get_all_items(self) -> ActionResult: ...

    async def create_item(self, form: ItemForm) -> ActionResult: ...

    async def update_item(self, form: ItemForm) -> ActionResult: ...

    async def delete_item(self, item_id: str) -> ActionResult: ...


class ItemsApiGateway:
    """
    `ItemsGateway` over the /api/v1/items endpoints.

    Transport and HTTP errors come back as failed ActionResults so the
    screen can show them as toasts.
    """

    def __init__(self, client: httpx.AsyncClient, prefix: str = "/api/v1/items"):
        self.client = client
        self.prefix = prefix

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        detail = body.get("detail") if isinstance(body, dict) else None
        if isinstance(detail, str):
            return detail
        return f"Request failed with status {response.status_code}"

    async def _call(self, method: str, url: str, **kwargs: Any) -> ActionResult:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            return ActionResult(success=False, error=str(e) or "Network error")
        if response.is_error:
            return ActionResult(success=False, error=self._error_message(response))
        return ActionResult(success=True, data=response.json())

    async def get_all_items(self) -> ActionResult:
        result = await self._call("GET", self.prefix)
        if result.success:
            result.data = [Item.model_validate(row) for row in result.data]
        return result

    async def create_item(self, form: ItemForm) -> ActionResult:
        payload = form.to_create().model_dump(mode="json")
        return await self._call("POST", self.prefix, json=payload)

    async def update_item(self, form: ItemForm) -> ActionResult:
        payload = form.to_update().model_dump(mode="json", exclude_none=True)
        return await self._call("PATCH", f"{self.prefix}/{form.id}", json=payload)

    async def delete_item(self, item_id: str) -> ActionResult:
        return await self._call("DELETE", f"{self.prefix}/{item_id}")


@dataclass
class ItemsScreen:
    gateway: ItemsGateway

    items: list[Item] = field(default_factory=list)
    loading: bool = True

    # Filters
    search_term: str = ""
    category_filter: CategoryFilter = ALL_CATEGORIES

    # Create / edit modal
    show_modal: bool = False
    editing_item: Item | None = None
    selected_category: ItemCategory | None = None
    submitting: bool = False
    form_errors: list[str] = field(default_factory=list)

    # Delete confirmation
    show_delete_confirm: bool = False
    item_to_delete: str | None = None
    deleting: set[str] = field(default_factory=set)

    toasts: list[Toast] = field(default_factory=list)

    # ----- Feedback -----

    def show_success(self, message: str) -> None:
        self.toasts.append(Toast("success", message))

    def show_error(self, message: str) -> None:
        self.toasts.append(Toast("error", message))

    # ----- Listing -----

    async def load(self) -> None:
        self.loading = True
        result = await self.gateway.get_all_items()
        if result.success and result.data is not None:
            self.items = list(result.data)
        self.loading = False

    @property
    def filtered_items(self) -> list[Item]:
        return filter_items(self.items, self.search_term, self.category_filter)

    @property
    def empty_message(self) -> str | None:
        if self.loading or self.filtered_items:
            return None
        if self.search_term or self.category_filter != ALL_CATEGORIES:
            return "No items found matching your search criteria."
        return "No items available"

    # ----- Create / edit -----

    def open_create(self, category: ItemCategory) -> None:
        self.selected_category = category
        self.editing_item = None
        self.form_errors = []
        self.show_modal = True

    def open_edit(self, item: Item) -> None:
        self.editing_item = item
        self.form_errors = []
        self.show_modal = True

    def close_modal(self) -> None:
        self.show_modal = False
        self.editing_item = None
        self.selected_category = None

    def form_defaults(self) -> dict[str, Any]:
        """Initial values for the modal's inputs."""
        item = self.editing_item
        if item is not None:
            return {
                "id": str(item.id),
                "category": item.category,
                "name": item.name,
                "price": item.price,
                "is_active": item.is_active,
            }
        return {
            "category": self.selected_category or "",
            "name": "",
            "price": "",
            "is_active": True,
        }

    async def submit(self, form_data: Mapping[str, Any]) -> bool:
        """
        Submit the create/edit form.

        Returns False without calling the gateway when a submission is
        already in flight or the form is invalid.
        """
        if self.submitting:
            return False

        try:
            form = ItemForm.from_form(form_data)
        except ValidationError as e:
            self.form_errors = [err["msg"] for err in e.errors()]
            return False
        self.form_errors = []

        editing = self.editing_item is not None
        if editing and form.id is None:
            form.id = self.editing_item.id

        self.submitting = True
        try:
            if editing:
                result = await self.gateway.update_item(form)
            else:
                result = await self.gateway.create_item(form)

            if result.success:
                self.close_modal()
                self.show_success(
                    "Item updated successfully" if editing else "Item created successfully"
                )
                await self.load()
            else:
                self.show_error(
                    result.error or f"Failed to {'update' if editing else 'create'} item"
                )
            return result.success
        finally:
            self.submitting = False

    # ----- Soft delete -----

    def request_delete(self, item_id: str) -> None:
        # The row's delete button is disabled while its delete is in flight
        if item_id in self.deleting:
            return
        self.item_to_delete = item_id
        self.show_delete_confirm = True

    def cancel_delete(self) -> None:
        self.show_delete_confirm = False
        self.item_to_delete = None

    async def confirm_delete(self) -> bool:
        item_id = self.item_to_delete
        if not item_id or item_id in self.deleting:
            return False

        self.show_delete_confirm = False
        self.item_to_delete = None
        self.deleting.add(item_id)
        try:
            result = await self.gateway.delete_item(item_id)
            if result.success:
                self.show_success("Item deleted successfully")
                await self.load()
            else:
                self.show_error(result.error or "Failed to delete item")
            return result.success
        finally:
            self.deleting.discard(item_id)
