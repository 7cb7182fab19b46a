"""Shared pytest fixtures.

The hosted backend is replaced by an in-memory fake exposing the subset of the
Supabase client used by the application: `table(...)` query builders,
`auth.*` calls and `postgrest.auth(...)`. The fake auth client persists its
session through the same storage object the real one would use.
"""

import json
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from typing import Any
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from starlette.responses import Response
from supabase_auth.errors import AuthError

from todoapp.app import App
from todoapp.config import Config
from todoapp.core.backend import CookieStorage, SupabaseBackend
from todoapp.core.core import Services
from todoapp.web.server import create_fastapi_app

STORAGE_KEY = "supabase.auth.token"
STRONG_PASSWORD = "Correct-Horse-42"


class FakeAuthApiError(AuthError):
    """Provider error as raised by the auth client."""

    def __init__(self, message: str, status: int = 400) -> None:
        Exception.__init__(self, message)
        self.message = message
        self.status = status
        self.code = None


class FakeQuery:
    """Chainable query builder mimicking the PostgREST client."""

    def __init__(self, backend: "FakeBackend", table: str) -> None:
        self._backend = backend
        self._rows: list[dict[str, Any]] = backend.tables.setdefault(table, [])
        self._action = "select"
        self._payload: dict[str, Any] = {}
        self._filters: list[tuple[str, Any]] = []
        self._order: tuple[str, bool] | None = None

    def select(self, *_columns: str) -> "FakeQuery":
        self._action = "select"
        return self

    def insert(self, row: dict[str, Any]) -> "FakeQuery":
        self._action = "insert"
        self._payload = row
        return self

    def update(self, payload: dict[str, Any]) -> "FakeQuery":
        self._action = "update"
        self._payload = payload
        return self

    def delete(self) -> "FakeQuery":
        self._action = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self._filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self._order = (column, desc)
        return self

    async def execute(self) -> SimpleNamespace:
        self._backend.executed.append((self._action, dict(self._payload), list(self._filters)))
        if self._backend.fail_with is not None:
            raise self._backend.fail_with

        if self._action == "insert":
            row = {"id": str(uuid4()), "created_at": self._backend.next_timestamp(), **self._payload}
            self._rows.append(row)
            return SimpleNamespace(data=[dict(row)])

        matched = [row for row in self._rows if all(str(row[c]) == str(v) for c, v in self._filters)]
        if self._action == "update":
            for row in matched:
                row.update(self._payload)
        elif self._action == "delete":
            for row in matched:
                self._rows.remove(row)
        elif self._order is not None:
            column, desc = self._order
            matched.sort(key=lambda row: row[column], reverse=desc)
        return SimpleNamespace(data=[dict(row) for row in matched])


class FakePostgrest:
    def __init__(self) -> None:
        self.token: str | None = None

    def auth(self, token: str) -> None:
        self.token = token


class FakeAuth:
    """Email/password auth persisting its session in the given storage."""

    def __init__(self, backend: "FakeBackend", storage: CookieStorage) -> None:
        self._backend = backend
        self._storage = storage

    async def sign_up(self, credentials: dict[str, str]) -> SimpleNamespace:
        if credentials["email"] in self._backend.accounts:
            raise FakeAuthApiError("User already registered", status=422)
        account = {"id": str(uuid4()), "email": credentials["email"], "password": credentials["password"]}
        self._backend.accounts[credentials["email"]] = account
        return await self._issue(account)

    async def sign_in_with_password(self, credentials: dict[str, str]) -> SimpleNamespace:
        account = self._backend.accounts.get(credentials["email"])
        if account is None or account["password"] != credentials["password"]:
            raise FakeAuthApiError("Invalid login credentials")
        return await self._issue(account)

    async def sign_out(self) -> None:
        await self._storage.remove_item(STORAGE_KEY)

    async def get_session(self) -> SimpleNamespace | None:
        raw = await self._storage.get_item(STORAGE_KEY)
        if raw is None:
            return None
        data = json.loads(raw)
        if data.get("revoked"):
            raise FakeAuthApiError("Invalid Refresh Token: Refresh Token Not Found")
        return SimpleNamespace(access_token=data["access_token"], user=SimpleNamespace(**data["user"]))

    async def get_user(self) -> SimpleNamespace | None:
        session = await self.get_session()
        if session is None:
            return None
        if session.access_token in self._backend.rejected_tokens:
            raise FakeAuthApiError("User from sub claim in JWT does not exist", status=403)
        return SimpleNamespace(user=session.user)

    async def _issue(self, account: dict[str, str]) -> SimpleNamespace:
        user = {"id": account["id"], "email": account["email"]}
        session = {"access_token": f"token-{account['id']}", "user": user}
        await self._storage.set_item(STORAGE_KEY, json.dumps(session))
        return SimpleNamespace(
            user=SimpleNamespace(**user),
            session=SimpleNamespace(access_token=session["access_token"], user=SimpleNamespace(**user)),
        )


class FakeSupabaseClient:
    def __init__(self, backend: "FakeBackend", storage: CookieStorage) -> None:
        self._backend = backend
        self.auth = FakeAuth(backend, storage)
        self.postgrest = FakePostgrest()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self._backend, name)


class FakeBackend(SupabaseBackend):
    """In-memory stand-in for the hosted backend shared by all request-scoped clients."""

    def __init__(self) -> None:
        super().__init__("https://example.supabase.co", "anon-key-for-tests-0123456789")
        self.tables: dict[str, list[dict[str, Any]]] = {"todos": []}
        self.accounts: dict[str, dict[str, str]] = {}
        self.rejected_tokens: set[str] = set()  # Sessions the provider no longer accepts for get_user
        self.executed: list[tuple[str, dict[str, Any], list[tuple[str, Any]]]] = []
        self.fail_with: Exception | None = None
        self._clock = datetime(2025, 1, 1, tzinfo=UTC)

    def next_timestamp(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def add_todo(self, user_id: str, title: str, completed: bool = False) -> dict[str, Any]:
        row = {
            "id": str(uuid4()),
            "user_id": user_id,
            "title": title,
            "completed": completed,
            "created_at": self.next_timestamp(),
        }
        self.tables["todos"].append(row)
        return row

    async def connect(self, storage: CookieStorage) -> Any:
        return FakeSupabaseClient(self, storage)


@pytest.fixture
def config():
    """Configuration for tests; cookies are not marked Secure so the test client sends them back."""
    return Config(
        supabase_url="https://example.supabase.co",
        supabase_anon_key="anon-key-for-tests-0123456789",
        cookie_secure=False,
    )


@pytest.fixture
def fake_backend():
    return FakeBackend()


@pytest.fixture
def storage():
    return CookieStorage({}, Response(), secure=False)


@pytest.fixture
def services(fake_backend, storage):
    """Request-scoped services bound to the fake backend."""
    return Services(FakeSupabaseClient(fake_backend, storage), storage)


@pytest.fixture
def todo_app(config, fake_backend):
    return App(config, fake_backend)


@pytest.fixture
def client(todo_app, config):
    """HTTP client running the full application (lifespan, session gate, routers)."""
    with TestClient(create_fastapi_app(todo_app, config), raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def signed_in_client(client):
    """Client with a freshly registered, signed-in account."""
    response = client.post("/register", json={"email": "ada@example.com", "password": STRONG_PASSWORD})
    assert response.status_code == 201
    return client
