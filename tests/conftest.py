"""
Pytest configuration and shared fixtures.

The Supabase client is replaced by ``FakeSupabaseClient``, an in-memory
table set that answers the same query chain FarmStore builds
(select / eq / in_ / order / limit / execute), so store tests run the
real FarmStore code.
"""

import itertools
from datetime import date
from types import SimpleNamespace
from typing import Any, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from farm_dashboard.auth.dependencies import get_current_user
from farm_dashboard.auth.rate_limit import limiter
from farm_dashboard.insights.service import get_today
from farm_dashboard.main import create_application
from farm_dashboard.models.user import UserProfile
from farm_dashboard.store.supabase_store import FarmStore, get_store

TODAY = date(2024, 3, 25)
DEFAULT_CREATED_AT = "2024-03-25T09:00:00+00:00"


# =============================================================================
# In-memory Supabase double
# =============================================================================

class FakeQuery:
    """One query against a FakeTable; mirrors the postgrest builder chain."""

    def __init__(self, table: "FakeTable", action: str, columns: str = "*", values: Any = None):
        self.table = table
        self.action = action
        self.columns = columns
        self.values = values
        self.filters: list = []
        self.order_by: Optional[tuple[str, bool]] = None
        self.max_rows: Optional[int] = None

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append(lambda row: str(row.get(column)) == str(value))
        return self

    def in_(self, column: str, values: list) -> "FakeQuery":
        allowed = {str(v) for v in values}
        self.filters.append(lambda row: str(row.get(column)) in allowed)
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by = (column, desc)
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.max_rows = count
        return self

    def _matches(self, row: dict) -> bool:
        return all(f(row) for f in self.filters)

    def execute(self) -> SimpleNamespace:
        client = self.table.client
        if client.fail:
            raise httpx.ConnectError("Supabase unreachable")
        client.calls.append((self.table.name, self.action))

        rows = self.table.rows
        if self.action == "insert":
            row = dict(self.values)
            row.setdefault("id", str(next(client.ids)))
            row.setdefault("created_at", DEFAULT_CREATED_AT)
            rows.append(row)
            return SimpleNamespace(data=[dict(row)])

        matched = [row for row in rows if self._matches(row)]

        if self.action == "update":
            for row in matched:
                row.update(self.values)
            return SimpleNamespace(data=[dict(row) for row in matched])

        if self.action == "delete":
            self.table.rows[:] = [row for row in rows if not self._matches(row)]
            return SimpleNamespace(data=[dict(row) for row in matched])

        result = [dict(row) for row in matched]
        if self.order_by:
            column, desc = self.order_by
            result.sort(key=lambda r: (r.get(column) is None, str(r.get(column) or "")), reverse=desc)
        if self.max_rows:
            result = result[:self.max_rows]
        if "sheep(" in self.columns:
            sheep = {str(s["id"]): s for s in client.table("sheep").rows}
            for row in result:
                animal = sheep.get(str(row.get("sheep_id")), {})
                row["sheep"] = {"ear_tag": animal.get("ear_tag"), "breed": animal.get("breed")}
        return SimpleNamespace(data=result)


class FakeTable:
    def __init__(self, client: "FakeSupabaseClient", name: str):
        self.client = client
        self.name = name
        self.rows = client.tables.setdefault(name, [])

    def select(self, columns: str = "*") -> FakeQuery:
        return FakeQuery(self, "select", columns=columns)

    def insert(self, values: dict) -> FakeQuery:
        return FakeQuery(self, "insert", values=values)

    def update(self, values: dict) -> FakeQuery:
        return FakeQuery(self, "update", values=values)

    def delete(self) -> FakeQuery:
        return FakeQuery(self, "delete")


class FakeSupabaseClient:
    """Tables keyed by name; ``fail=True`` makes every request fail."""

    def __init__(self, tables: Optional[dict[str, list[dict]]] = None, fail: bool = False):
        self.tables = {name: [dict(r) for r in rows] for name, rows in (tables or {}).items()}
        self.fail = fail
        self.calls: list[tuple[str, str]] = []
        self.ids = itertools.count(1000)

    def table(self, name: str) -> FakeTable:
        return FakeTable(self, name)


# =============================================================================
# Seed data
# =============================================================================

def seed_tables() -> dict[str, list[dict]]:
    """A small farm: four sheep, sales, expenses, ledger, health records, users."""
    return {
        "sheep": [
            {"id": "s1", "ear_tag": "A-001", "breed": "Dorper", "birth_date": "2022-03-25",
             "gender": "female", "weight": 55, "health_status": "healthy",
             "vaccination_status": "up_to_date", "estimated_value": 15000,
             "created_by": "staff-1", "created_at": "2024-01-10T08:00:00+00:00"},
            {"id": "s2", "ear_tag": "B-002", "breed": "Merino", "birth_date": "2018-01-01",
             "gender": "male", "weight": 25, "health_status": "sick",
             "vaccination_status": "overdue", "estimated_value": "8,000",
             "created_by": "admin-1", "created_at": "2024-01-11T08:00:00+00:00"},
            {"id": "s3", "ear_tag": "C-003", "breed": None, "birth_date": None,
             "gender": "female", "weight": None, "health_status": "pregnant",
             "vaccination_status": "due", "estimated_value": None,
             "created_by": "staff-1", "created_at": "2024-01-12T08:00:00+00:00"},
            {"id": "s4", "ear_tag": "D-004", "breed": "Dorper", "birth_date": "2023-06-01",
             "gender": "male", "weight": 120, "health_status": "recovering",
             "vaccination_status": "up_to_date", "estimated_value": 12000,
             "created_by": "admin-1", "created_at": "2024-01-13T08:00:00+00:00"},
        ],
        "sales_records": [
            {"id": "1", "transaction_type": "sale", "amount": 1200, "buyer_seller": "Market Co",
             "date": "2024-03-20", "created_by": "admin-1"},
            {"id": "2", "transaction_type": None, "amount": "300", "buyer_seller": "Neighbour",
             "date": "2024-02-10", "created_by": "admin-1"},
        ],
        "expenses": [
            {"id": "1", "category": "feed", "amount": 500, "description": "Hay bales",
             "date": "2024-03-15", "created_by": "staff-1"},
            {"id": "3", "category": "veterinary", "amount": 200, "description": "Deworming",
             "date": "2024-02-05", "created_by": "staff-1"},
        ],
        "debts_credits": [
            {"id": "d1", "type": "debt", "amount": 1000, "paid_amount": 400, "status": "partial",
             "counterparty": "Feed Store", "due_date": "2024-03-01",
             "created_at": "2024-03-02T10:00:00+00:00"},
            {"id": "d2", "type": "debt", "amount": 500, "paid_amount": 500, "status": "paid",
             "counterparty": "Vet Clinic", "due_date": "2024-01-01",
             "created_at": "2024-01-05T10:00:00+00:00"},
            {"id": "c1", "type": "credit", "amount": 800, "paid_amount": 0, "status": "pending",
             "counterparty": "Butcher", "due_date": "2024-04-30",
             "created_at": "2024-02-15T10:00:00+00:00"},
        ],
        "health_records": [
            {"id": "h1", "sheep_id": "s2", "record_type": "illness", "description": "Coughing",
             "date": "2024-03-18", "created_at": "2024-03-18T07:00:00+00:00"},
            {"id": "h2", "sheep_id": "s1", "record_type": "checkup", "description": "Routine",
             "date": "2024-02-20", "created_at": "2024-02-20T07:00:00+00:00"},
            {"id": "h3", "sheep_id": "s1", "record_type": "vaccination", "description": "CDT",
             "date": "2024-03-01", "created_at": "2024-03-01T07:00:00+00:00"},
        ],
        "users": [
            {"id": "admin-1", "email": "admin@farm.test", "full_name": "Ada Admin", "role": "admin",
             "created_at": "2024-01-01T00:00:00+00:00"},
            {"id": "staff-1", "email": "sam@farm.test", "full_name": "Sam Staff", "role": "farmer",
             "created_at": "2024-01-02T00:00:00+00:00"},
            {"id": "vet-1", "email": "val@farm.test", "full_name": "Val Vet", "role": "vet",
             "created_at": "2024-01-03T00:00:00+00:00"},
        ],
    }


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def fake_client() -> FakeSupabaseClient:
    return FakeSupabaseClient(seed_tables())


@pytest.fixture
def store(fake_client) -> FarmStore:
    return FarmStore(fake_client)


@pytest.fixture
def failing_store() -> FarmStore:
    return FarmStore(FakeSupabaseClient(seed_tables(), fail=True))


@pytest.fixture
def admin_user() -> UserProfile:
    return UserProfile(id="admin-1", email="admin@farm.test", full_name="Ada Admin", role="admin")


@pytest.fixture
def staff_user() -> UserProfile:
    return UserProfile(id="staff-1", email="sam@farm.test", full_name="Sam Staff", role="farmer")


@pytest.fixture
def vet_user() -> UserProfile:
    return UserProfile(id="vet-1", email="val@farm.test", full_name="Val Vet", role="vet")


@pytest.fixture
def make_client():
    """
    Build a TestClient for a given user and store.

    Usage:
        client = make_client(admin_user, store)
    """
    def build(user: UserProfile, farm_store: FarmStore) -> TestClient:
        app = create_application()
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_store] = lambda: farm_store
        app.dependency_overrides[get_today] = lambda: TODAY
        return TestClient(app)

    return build


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Export limits are counted per client address across app instances."""
    limiter.reset()
    yield
