"""Shared fixtures for enrollgate tests."""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from enrollgate.api.app import _store, app
from enrollgate.enrollments import EnrollmentService
from enrollgate.rbac import Principal, Role
from enrollgate.storage.memory import MemoryStore
from enrollgate.tokens import issue_token

TEST_SECRET = "test-secret-key-for-jwt-signing-0123456789"


@pytest.fixture(autouse=True)
def jwt_secret(monkeypatch):
    """Pin the signing secret and default switches for every test."""
    monkeypatch.setenv("EG_JWT_SECRET", TEST_SECRET)
    monkeypatch.delenv("EG_TOKEN_TTL_SECONDS", raising=False)
    monkeypatch.delenv("EG_PROTECT_USER_RESET", raising=False)
    monkeypatch.delenv("EG_REDACT_USER_PASSWORDS", raising=False)
    return TEST_SECRET


@pytest.fixture
def store():
    """Fresh seeded store for each test."""
    return MemoryStore()


@pytest.fixture
def service(store):
    return EnrollmentService(store)


@pytest_asyncio.fixture
async def client():
    """HTTP test client wired to the app's store, restored to seed data."""
    await _store.restore_seed()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    await _store.restore_seed()


def make_token(
    identity: str,
    role: Role,
    owned_id: str | None = None,
    *,
    ttl: int = 300,
    now: float | None = None,
    secret: str = TEST_SECRET,
) -> str:
    return issue_token(Principal(identity, role, owned_id), secret, ttl, now=now)


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token_for():
    """Factory fixture: ``token_for(identity, role, owned_id, ttl=..., now=...)``."""
    return make_token


@pytest.fixture
def auth_headers():
    """Factory fixture turning a token into an Authorization header dict."""
    return bearer


@pytest.fixture
def admin_headers():
    return bearer(make_token("user4@abc.com", Role.ADMIN))


@pytest.fixture
def student_headers():
    """Headers for seed student 650610001."""
    return bearer(make_token("user1@abc.com", Role.STUDENT, "650610001"))


@pytest.fixture
def other_student_headers():
    """Headers for seed student 650610002."""
    return bearer(make_token("user2@abc.com", Role.STUDENT, "650610002"))
