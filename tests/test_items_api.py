import math
import uuid

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from pydantic import ValidationError

from app.core.auth import get_auth_session, require_super_admin
from app.core.session import Identity, SessionCookie
from app.schemas.item import ItemCreate, ItemUpdate

from conftest import COMPANY_ADMIN, ROLES, SUPER_ADMIN, FakeSession

BURGER = {"category": "food", "name": "Burger", "price": 9.90, "is_active": True}


def test_create_then_list_includes_item(api):
    client = api()
    created = client.post("/api/v1/items", json=BURGER)
    assert created.status_code == 201
    body = created.json()
    uuid.UUID(body["id"])

    items = client.get("/api/v1/items").json()
    assert len(items) == 1
    assert items[0] == {**BURGER, "id": body["id"]}


def test_soft_delete_keeps_row(api, db):
    client = api()
    item_id = client.post("/api/v1/items", json=BURGER).json()["id"]

    response = client.delete(f"/api/v1/items/{item_id}")
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    items = client.get("/api/v1/items").json()
    assert [(i["id"], i["is_active"]) for i in items] == [(item_id, False)]
    assert len(db.tables["items"]) == 1
    assert ("delete", "items") not in db.requests


def test_filter_by_search_and_category(api, db):
    db.add_item("Cheese Burger", 12.5, "food")
    db.add_item("burrito", 8.0, "food")
    db.add_item("Burgundy Soda", 4.0, "drink")
    db.add_item("Fries", 5.0, "food")

    response = api().get("/api/v1/items", params={"search": "bur", "category": "food"})
    assert response.status_code == 200
    assert sorted(i["name"] for i in response.json()) == ["Cheese Burger", "burrito"]


def test_list_returns_inactive_items_sorted_by_name(api, db):
    db.add_item("Tea", 3.0, "drink", is_active=False)
    db.add_item("Coffee", 4.5, "drink")

    names = [i["name"] for i in api().get("/api/v1/items").json()]
    assert names == ["Coffee", "Tea"]


def test_update_item_partial(api, db):
    row = db.add_item("Latte", 6.0, "drink")

    response = api().patch(f"/api/v1/items/{row['id']}", json={"price": 6.5})
    assert response.status_code == 200
    assert response.json() == {**row, "price": 6.5}


def test_update_rejects_id_change(api, db):
    row = db.add_item("Latte", 6.0, "drink")
    response = api().patch(
        f"/api/v1/items/{row['id']}", json={"id": str(uuid.uuid4())}
    )
    assert response.status_code == 422


def test_missing_item_is_404(api):
    client = api()
    missing = uuid.uuid4()
    assert client.get(f"/api/v1/items/{missing}").status_code == 404
    assert client.patch(f"/api/v1/items/{missing}", json={"name": "X"}).status_code == 404
    assert client.delete(f"/api/v1/items/{missing}").status_code == 404


def test_create_validation(api):
    client = api()
    assert client.post("/api/v1/items", json={**BURGER, "category": "dessert"}).status_code == 422
    assert client.post("/api/v1/items", json={**BURGER, "name": "   "}).status_code == 422
    assert client.post("/api/v1/items", json={**BURGER, "price": -1}).status_code == 422
    assert client.post("/api/v1/items", json={**BURGER, "price": 1.234}).status_code == 422


@pytest.mark.parametrize("price", [math.inf, -math.inf, math.nan])
def test_non_finite_price_is_rejected(price):
    with pytest.raises(ValidationError):
        ItemCreate(**{**BURGER, "price": price})
    with pytest.raises(ValidationError):
        ItemUpdate(price=price)


def test_database_failure_is_502_and_nothing_changes(api, db):
    db.fail = True
    response = api().post("/api/v1/items", json=BURGER)
    assert response.status_code == 502
    assert response.json()["detail"] == "Failed to create item"
    assert db.tables["items"] == []


def test_anonymous_is_401(api):
    assert api(user=None).get("/api/v1/items").status_code == 401


def test_super_admin_is_403(api):
    response = api(user=SUPER_ADMIN).get("/api/v1/items")
    assert response.status_code == 403
    assert response.json()["detail"] == "Company admin access required"


def test_user_without_profile_is_403(api):
    response = api(user=Identity(id="u-ghost")).get("/api/v1/items")
    assert response.status_code == 403
    assert response.json()["detail"] == "User profile not found"


def test_require_super_admin_guards_platform_routes(db):
    app = FastAPI()

    @app.get("/companies", dependencies=[Depends(require_super_admin)])
    def companies():
        return []

    app.dependency_overrides[get_auth_session] = lambda: FakeSession(db, user=SUPER_ADMIN, roles=ROLES)
    assert TestClient(app).get("/companies").status_code == 200

    app.dependency_overrides[get_auth_session] = lambda: FakeSession(db, user=COMPANY_ADMIN, roles=ROLES)
    response = TestClient(app).get("/companies")
    assert response.status_code == 403
    assert response.json()["detail"] == "Super admin access required"


def test_api_response_carries_refreshed_cookies(api):
    refreshed = [
        SessionCookie(name="sb-access-token", value="new-access", options={"path": "/", "httponly": True}),
        SessionCookie(name="sb-refresh-token", value="new-refresh", options={"path": "/", "httponly": True}),
    ]
    response = api(refreshed=refreshed).get("/api/v1/items")
    assert response.status_code == 200

    set_cookies = response.headers.get_list("set-cookie")
    assert any(c.startswith("sb-access-token=new-access") for c in set_cookies)
    assert any(c.startswith("sb-refresh-token=new-refresh") for c in set_cookies)


def test_write_responses_carry_refreshed_cookies(api):
    refreshed = [SessionCookie(name="sb-access-token", value="new-access", options={"path": "/"})]
    response = api(refreshed=refreshed).post("/api/v1/items", json=BURGER)
    assert response.status_code == 201
    assert "sb-access-token=new-access" in response.headers["set-cookie"]
