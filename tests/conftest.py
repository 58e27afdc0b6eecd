"""
Shared fixtures.

The platform Supabase client is replaced with ``FakeSupabase``, an in-memory
table store answering the subset of the postgrest query builder the services
use (select/insert/update/delete, eq/neq/gt/lte/in_, order, limit). Outbound
HTTP goes through ``httpx.MockTransport``.
"""

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.dependencies import get_http_client_factory
from app.core.rate_limit import limiter
from app.core.security import hash_password
from app.database.supabase_client import get_supabase
from app.main import app
from app.modules.sessions.service import SessionStore
from app.modules.supabase_config.routes import get_user_client_factory

USER_PASSWORD = "user-password-1"
ADMIN_PASSWORD = "admin-password-1"

TABLE_DEFAULTS = {
    "users": {"name": None, "avatar_url": None, "email_verified": False, "webhook_url": None},
    "admin_users": {"name": None, "is_active": True},
    "projects": {"description": None, "icon": "folder", "color": "#3b82f6", "sort_order": 0},
    "sub_projects": {"description": None, "icon": "folder", "sort_order": 0},
    "project_files": {
        "description": None,
        "file_type": None,
        "category": None,
        "sub_category": None,
        "content": None,
        "size_bytes": None,
    },
    "agents": {
        "description": None,
        "webhook_url": None,
        "category": None,
        "is_active": True,
        "is_global": True,
    },
    "user_supabase_config": {
        "supabase_anon_key": None,
        "service_role_secret": None,
        "project_bucket_name": "projects",
        "is_configured": False,
        "use_service_role": False,
        "last_verified_at": None,
    },
}


def _comparable(value):
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return value
    return value


class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.payload = None
        self.filters = []
        self.orders = []
        self.limit_count = None

    def select(self, columns="*"):
        self.op = "select"
        self.columns = columns
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, values):
        self.op = "update"
        self.payload = values
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def gt(self, column, value):
        self.filters.append(
            lambda row: row.get(column) is not None and _comparable(row[column]) > _comparable(value)
        )
        return self

    def lte(self, column, value):
        self.filters.append(
            lambda row: row.get(column) is not None and _comparable(row[column]) <= _comparable(value)
        )
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.orders.append((column, desc))
        return self

    def limit(self, count):
        self.limit_count = count
        return self

    def _project(self, row):
        if self.columns.strip() == "*":
            return dict(row)
        names = [c.strip() for c in self.columns.split(",")]
        return {name: row.get(name) for name in names}

    def execute(self):
        if self.table in self.db.failing_tables:
            raise RuntimeError(f"connection to {self.table} lost")
        self.db.calls.append((self.table, self.op))
        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "insert":
            payloads = self.payload if isinstance(self.payload, list) else [self.payload]
            inserted = [self.db.new_row(self.table, p) for p in payloads]
            rows.extend(inserted)
            return SimpleNamespace(data=[dict(r) for r in inserted])

        matched = [r for r in rows if all(f(r) for f in self.filters)]

        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=[dict(r) for r in matched])

        if self.op == "delete":
            self.db.tables[self.table] = [r for r in rows if r not in matched]
            return SimpleNamespace(data=[dict(r) for r in matched])

        for column, desc in reversed(self.orders):
            matched.sort(
                key=lambda r: (r.get(column) is None, _comparable(r.get(column))),
                reverse=desc
            )
        if self.limit_count is not None:
            matched = matched[:self.limit_count]
        return SimpleNamespace(data=[self._project(r) for r in matched])


class FakeSupabase:
    def __init__(self):
        self.tables = {}
        self.failing_tables = set()
        self.calls = []
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def table(self, name):
        return FakeQuery(self, name)

    def new_row(self, table, payload):
        # Strictly increasing timestamps keep created_at ordering deterministic
        self._clock += timedelta(seconds=1)
        row = {"id": str(uuid.uuid4()), "created_at": self._clock.isoformat(), "updated_at": self._clock.isoformat()}
        row.update(TABLE_DEFAULTS.get(table, {}))
        row.update(payload)
        return row

    def rows(self, table):
        return self.tables.get(table, [])

    def writes(self):
        return [call for call in self.calls if call[1] != "select"]


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def http_requests():
    """Requests captured by the mock outbound transport"""
    return []


@pytest.fixture
def http_handler():
    """Replaced per test to script the upstream answer"""
    return {"handler": lambda request: httpx.Response(200, json={"ok": True})}


@pytest.fixture
def client(fake_db, http_requests, http_handler):
    def transport_handler(request):
        http_requests.append(request)
        return http_handler["handler"](request)

    transport = httpx.MockTransport(transport_handler)

    def client_factory(**kwargs):
        return httpx.AsyncClient(transport=transport, **kwargs)

    app.dependency_overrides[get_supabase] = lambda: fake_db
    app.dependency_overrides[get_http_client_factory] = lambda: client_factory
    limiter.enabled = False
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def user_client_factory(client):
    """Records clients built for users' own Supabase projects"""
    built = []

    class FakeStorage:
        def __init__(self, fail):
            self.fail = fail

        def list_buckets(self):
            if self.fail:
                raise RuntimeError("Invalid API key")
            return []

    def factory(url, key):
        built.append((url, key))
        return SimpleNamespace(storage=FakeStorage(fail=key == "bad-key"))

    app.dependency_overrides[get_user_client_factory] = lambda: factory
    return built


def create_user(fake_db, email="user@example.com", password=USER_PASSWORD, name="Test User"):
    return fake_db.table("users").insert({
        "email": email,
        "password_hash": hash_password(password),
        "name": name,
        "email_verified": True,
    }).execute().data[0]


def create_admin(fake_db, email="admin@example.com", password=ADMIN_PASSWORD, name="Admin", is_active=True):
    return fake_db.table("admin_users").insert({
        "email": email,
        "password_hash": hash_password(password),
        "name": name,
        "is_active": is_active,
    }).execute().data[0]


def configure_supabase(fake_db, user_id):
    fake_db.table("user_supabase_config").insert({
        "user_id": user_id,
        "supabase_url": "encrypted",
        "supabase_anon_key": "encrypted",
        "is_configured": True,
    }).execute()


@pytest.fixture
def user(fake_db):
    return create_user(fake_db)


@pytest.fixture
def user_client(client, fake_db, user):
    """Client carrying a valid auth_token cookie"""
    session = SessionStore(fake_db, "user").create(user["id"], user["email"])
    client.cookies.set("auth_token", session["token"])
    return client


@pytest.fixture
def configured_user_client(user_client, fake_db, user):
    configure_supabase(fake_db, user["id"])
    return user_client


@pytest.fixture
def admin(fake_db):
    return create_admin(fake_db)


@pytest.fixture
def admin_client(client, fake_db, admin):
    """Client carrying a valid admin_session cookie"""
    session = SessionStore(fake_db, "admin").create(admin["id"], admin["email"])
    client.cookies.set("admin_session", session["token"])
    return client
