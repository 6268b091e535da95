"""In-memory stand-in for the Supabase client used by the service tests."""

from __future__ import annotations

import copy
import itertools
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List

import pytest
from postgrest.exceptions import APIError

_clock = itertools.count()
_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)

TABLE_DEFAULTS = {
    "employment_categories": {"is_active": True, "description": None},
    "notifications": {"is_active": True},
    "employment_registrations": {"status": "pending", "program_id": None, "experience": None, "skills": None},
    "file_uploads": {"records_count": 0, "uploaded_by": None},
    "program_stop_requests": {"admin_notes": None, "status": "pending"},
    "admins": {"role": "moderator", "permissions": {}, "is_active": True},
}


def _timestamp() -> str:
    return (_EPOCH + timedelta(seconds=next(_clock))).isoformat()


class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.columns = "*"
        self.filters: List[Callable[[Dict], bool]] = []
        self.ordering = None
        self.max_rows = None
        self.operation = "select"
        self.payload: Any = None
        self.on_conflict = None

    # builders
    def select(self, columns: str = "*"):
        self.columns = columns
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.ordering = (column, desc)
        return self

    def limit(self, count):
        self.max_rows = count
        return self

    def insert(self, payload):
        self.operation, self.payload = "insert", payload
        return self

    def upsert(self, payload, on_conflict=""):
        self.operation, self.payload, self.on_conflict = "upsert", payload, on_conflict
        return self

    def update(self, payload):
        self.operation, self.payload = "update", payload
        return self

    def delete(self):
        self.operation = "delete"
        return self

    # execution
    def _matches(self, row):
        return all(check(row) for check in self.filters)

    def _project(self, row):
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        wanted = [c.strip() for c in self.columns.split(",")]
        return {c: copy.deepcopy(row.get(c)) for c in wanted}

    def _new_row(self, values):
        now = _timestamp()
        row = {"id": str(uuid.uuid4()), "created_at": now, "updated_at": now}
        if self.table == "employment_registrations":
            row["registration_date"] = now
        if self.table == "file_uploads":
            row["upload_date"] = now
        row.update(copy.deepcopy(TABLE_DEFAULTS.get(self.table, {})))
        row.update(copy.deepcopy(values))
        return row

    def execute(self):
        if self.table in self.db.failing_tables:
            raise APIError({"message": f"permission denied for table {self.table}", "code": "42501"})
        rows = self.db.tables.setdefault(self.table, [])

        if self.operation == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            created = [self._new_row(values) for values in payload]
            rows.extend(created)
            return FakeResponse(copy.deepcopy(created))

        if self.operation == "upsert":
            saved = []
            for values in self.payload:
                existing = next((r for r in rows if r.get(self.on_conflict) == values.get(self.on_conflict)), None)
                if existing is None:
                    existing = self._new_row(values)
                    rows.append(existing)
                else:
                    existing.update(copy.deepcopy(values))
                saved.append(copy.deepcopy(existing))
            return FakeResponse(saved)

        matched = [r for r in rows if self._matches(r)]

        if self.operation == "update":
            for row in matched:
                row.update(copy.deepcopy(self.payload))
            return FakeResponse(copy.deepcopy(matched))

        if self.operation == "delete":
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
            return FakeResponse(copy.deepcopy(matched))

        if self.ordering:
            column, desc = self.ordering
            matched = sorted(matched, key=lambda r: str(r.get(column) or ""), reverse=desc)
        if self.max_rows is not None:
            matched = matched[: self.max_rows]
        return FakeResponse([self._project(r) for r in matched])


class FakeRpc:
    def __init__(self, handler, params):
        self.handler = handler
        self.params = params

    def execute(self):
        return FakeResponse(self.handler(**self.params))


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict]] = {}
        self.failing_tables = set()
        self.rpc_calls: List[tuple] = []
        self.passwords: Dict[str, str] = {}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: Dict):
        self.rpc_calls.append((name, dict(params)))
        handlers = {
            "hash_password": lambda password: f"hashed::{password}",
            "verify_password": self._verify_password,
        }
        return FakeRpc(handlers[name], params)

    def _verify_password(self, username, password):
        admin = next((a for a in self.tables.get("admins", []) if a["username"] == username), None)
        return bool(admin) and admin.get("password_hash") == f"hashed::{password}"

    def add(self, table: str, **values) -> Dict:
        return self.table(table).insert(values).execute().data[0]

    def rows(self, table: str) -> List[Dict]:
        return self.tables.get(table, [])


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def catalog(db):
    """Four categories with one program and sub-project each, plus clients."""
    categories = {}
    programs = {}
    sub_projects = {}
    for name in ("foodelife", "farmelife", "entrelife", "organelife"):
        category = db.add("employment_categories", name=name, description=f"{name} description")
        categories[name] = category
        sub_project = db.add("sub_projects", name=f"{name} cluster", category_id=category["id"])
        sub_projects[name] = sub_project
        programs[name] = db.add(
            "programs",
            name=f"{name} starter",
            category_id=category["id"],
            sub_project_id=sub_project["id"],
            description=f"Starter program for {name}",
            conditions="Age 18-55",
        )
    clients = {
        "food": db.add(
            "registered_clients",
            customer_id="C001",
            name="Anitha",
            mobile_number="9876543210",
            category="Foodelife",
            panchayath="Kottayam",
            district="Kottayam",
            agent_pro="Agent A",
        ),
        "jobcard": db.add(
            "registered_clients",
            customer_id="C002",
            name="Biju",
            mobile_number="9123456789",
            category="Job Card",
            panchayath="Pala",
            district="Kottayam",
            agent_pro="Agent B",
        ),
    }
    return {"categories": categories, "programs": programs, "sub_projects": sub_projects, "clients": clients}
