import os
import uuid

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

os.environ.setdefault("SUPABASE_URL", "http://supabase.test")
os.environ.setdefault("SUPABASE_KEY", "anon-test-key")

from app.core.auth import get_auth_session
from app.core.config import get_settings
from app.core.session import Identity, RoleLookup, SessionCookie

get_settings.cache_clear()


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Just enough of the PostgREST builder for the repositories."""

    def __init__(self, db: "FakeDatabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.filters: list[tuple[str, str]] = []
        self.order_by: str | None = None
        self.max_rows: int | None = None

    def select(self, columns: str = "*"):
        self.op = "select"
        return self

    def insert(self, values: dict):
        self.op = "insert"
        self.payload = values
        return self

    def update(self, values: dict):
        self.op = "update"
        self.payload = values
        return self

    def eq(self, column: str, value):
        self.filters.append((column, str(value)))
        return self

    def order(self, column: str):
        self.order_by = column
        return self

    def limit(self, n: int):
        self.max_rows = n
        return self

    def _matches(self, row: dict) -> bool:
        return all(str(row.get(col)) == val for col, val in self.filters)

    def execute(self) -> FakeResponse:
        self.db.requests.append((self.op, self.table))
        if self.db.fail:
            raise APIError({"message": "connection refused", "code": "500"})

        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "insert":
            row = {"id": str(uuid.uuid4()), **self.payload}
            rows.append(row)
            return FakeResponse([dict(row)])

        matched = [row for row in rows if self._matches(row)]

        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return FakeResponse([dict(row) for row in matched])

        if self.order_by:
            matched = sorted(matched, key=lambda row: row[self.order_by])
        if self.max_rows is not None:
            matched = matched[: self.max_rows]
        return FakeResponse([dict(row) for row in matched])


class FakeDatabase:
    def __init__(self):
        self.tables: dict[str, list[dict]] = {"items": []}
        self.requests: list[tuple[str, str]] = []
        self.fail = False

    def add_item(self, name: str, price: float, category: str, is_active: bool = True) -> dict:
        row = {
            "id": str(uuid.uuid4()),
            "name": name,
            "price": price,
            "category": category,
            "is_active": is_active,
        }
        self.tables["items"].append(row)
        return row


class FakeSession:
    """Stands in for SupabaseSession: auth, role lookup and tables."""

    def __init__(
        self,
        db: FakeDatabase | None = None,
        user: Identity | None = None,
        roles: dict[str, str] | None = None,
        refreshed: list[SessionCookie] | None = None,
        user_error: Exception | None = None,
        role_error: Exception | None = None,
    ):
        self.db = db or FakeDatabase()
        self.user = user
        self.roles = roles or {}
        self.refreshed = refreshed or []
        self.user_error = user_error
        self.role_error = role_error
        self.cookies_to_set: list[SessionCookie] = []
        self.role_calls = 0

    def get_user(self) -> Identity | None:
        self.cookies_to_set.extend(self.refreshed)
        if self.user_error:
            raise self.user_error
        return self.user

    def get_role(self, user_id: str) -> RoleLookup:
        self.role_calls += 1
        if self.role_error:
            raise self.role_error
        role = self.roles.get(user_id)
        if role is None:
            return RoleLookup(error="PGRST116: no rows returned")
        return RoleLookup(role=role)

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self.db, name)


COMPANY_ADMIN = Identity(id="u-company", email="owner@cafe.test")
SUPER_ADMIN = Identity(id="u-super", email="root@pos.test")
ROLES = {COMPANY_ADMIN.id: "company_admin", SUPER_ADMIN.id: "super_admin"}


@pytest.fixture
def db():
    return FakeDatabase()


@pytest.fixture
def api(db):
    """
    TestClient for the real app with the Supabase session swapped out.

    Call it with the identity that should be signed in (or None) and,
    optionally, the cookies a token refresh would rewrite.
    """
    from app.main import app

    def _client(
        user: Identity | None = COMPANY_ADMIN,
        refreshed: list[SessionCookie] | None = None,
    ) -> TestClient:
        session = FakeSession(db, user=user, roles=ROLES, refreshed=refreshed)
        app.dependency_overrides[get_auth_session] = lambda: session
        return TestClient(app)

    yield _client
    app.dependency_overrides.clear()
