import copy
import os
import uuid
from datetime import datetime, timedelta

# Settings are read at import time
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("JWT_EXPIRE", "30d")
os.environ.setdefault("PORT", "5000")
os.environ.setdefault("ENV", "test")

import pytest
from fastapi.testclient import TestClient

from tuitiondesk.core import database
from tuitiondesk.core.security import create_access_token, get_password_hash
from tuitiondesk.main import app

ADMIN_PASSWORD = "secret123"


class FakeResult:
    def __init__(self, data, count=None):
        self.data = data
        self.count = count


class FakeQuery:
    """The subset of the Supabase query builder the routers use."""

    def __init__(self, db, table):
        self.db = db
        self.rows = db.tables.setdefault(table, [])
        self.action = "select"
        self.payload = None
        self.filters = []
        self.sort = None
        self.max_rows = None
        self.single = False
        self.count = None

    def select(self, columns="*", count=None):
        self.action = "select"
        self.count = count
        return self

    def insert(self, payload):
        self.action, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.action, self.payload = "update", payload
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row[column] >= value)
        return self

    def lte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row[column] <= value)
        return self

    def lt(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row[column] < value)
        return self

    def order(self, column, desc=False):
        self.sort = (column, desc)
        return self

    def limit(self, size):
        self.max_rows = size
        return self

    def maybe_single(self):
        self.single = True
        return self

    def _matching(self):
        return [row for row in self.rows if all(f(row) for f in self.filters)]

    def execute(self):
        if self.action == "insert":
            payload = self.payload if isinstance(self.payload, list) else [self.payload]
            created = []
            for item in payload:
                row = {"id": str(uuid.uuid4()), "created_at": self.db.next_timestamp(), **copy.deepcopy(item)}
                self.rows.append(row)
                created.append(copy.deepcopy(row))
            return FakeResult(created)

        matching = self._matching()
        if self.action == "update":
            for row in matching:
                row.update(copy.deepcopy(self.payload))
            return FakeResult(copy.deepcopy(matching))
        if self.action == "delete":
            for row in matching:
                self.rows.remove(row)
            return FakeResult(copy.deepcopy(matching))

        if self.sort:
            column, desc = self.sort
            matching = sorted(
                matching,
                key=lambda row: (row.get(column) is None, row.get(column)),
                reverse=desc,
            )
        if self.max_rows is not None:
            matching = matching[: self.max_rows]
        data = copy.deepcopy(matching)
        if self.single:
            # supabase-py answers None when maybe_single() finds nothing
            return FakeResult(data[0]) if data else None
        return FakeResult(data, count=len(data) if self.count else None)


class FakeSupabase:
    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self._clock = datetime(2026, 1, 1, 8, 0, 0)

    def next_timestamp(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def table(self, name):
        return FakeQuery(self, name)

    def add(self, table, **fields) -> dict:
        return self.table(table).insert(fields).execute().data[0]

    def rows(self, table) -> list[dict]:
        return self.tables.get(table, [])

    def get(self, table, record_id) -> dict | None:
        return next((row for row in self.rows(table) if row["id"] == record_id), None)


@pytest.fixture
def db():
    fake = FakeSupabase()
    database._supabase_client = fake
    yield fake
    database._supabase_client = None


@pytest.fixture
def admin(db):
    return db.add(
        "users",
        name="Admin",
        email="admin@brightminds.in",
        role="admin",
        profile_id=None,
        password_hash=get_password_hash(ADMIN_PASSWORD),
        is_active=True,
    )


@pytest.fixture
def admin_headers(admin):
    return {"Authorization": f"Bearer {create_access_token(admin['id'], 'admin')}"}


@pytest.fixture
def role_headers(db):
    """Auth headers for a fresh user with the given role, optionally linked to a profile row."""

    def _headers(role: str, profile_id: str | None = None) -> dict:
        user = db.add(
            "users", name=role.title(), email=f"{role}@brightminds.in", role=role, profile_id=profile_id, is_active=True,
        )
        return {"Authorization": f"Bearer {create_access_token(user['id'], role)}"}

    return _headers


@pytest.fixture
def client(db):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def anyio_backend():
    return "asyncio"


# ---- seed helpers ----
@pytest.fixture
def standard(db):
    return db.add("standards", name="Class 10", level=10, description="Board exam year", subjects=[], is_active=True)


@pytest.fixture
def subject(db, standard):
    return db.add(
        "subjects", name="mathematics", description="Algebra and geometry",
        duration="1 year", status="active", standard=standard["id"],
    )


@pytest.fixture
def make_student(db, standard):
    def _make(name="Asha Rao", **fields):
        record = {
            "student_id": f"STU2026{len(db.rows('students')) + 1:04d}",
            "name": name,
            "email": f"{name.split()[0].lower()}@brightminds.in",
            "phone": "9876543210",
            "standard": standard["id"],
            "status": "active",
            "batches": [],
        }
        record.update(fields)
        return db.add("students", **record)

    return _make


@pytest.fixture
def make_batch(db, standard, subject):
    def _make(**fields):
        record = {
            "name": "Maths Morning",
            "standard": standard["id"],
            "subject": subject["id"],
            "teacher": None,
            "start_date": "2026-04-01",
            "end_date": "2027-03-31",
            "schedule": {"days": ["Monday", "Wednesday"], "start_time": "07:00", "end_time": "08:30"},
            "capacity": 30,
            "fees": 12000,
            "status": "upcoming",
            "enrolled_students": [],
        }
        record.update(fields)
        return db.add("batches", **record)

    return _make
