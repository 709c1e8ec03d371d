"""
tests/conftest.py -- Shared test fixtures for inventory integration tests.

This module provides:
  - _make_test_stores(): creates an isolated in-memory DB shared by both stores
  - _patch_lifespan(): wires test collaborators into app.state, bypassing real startup
  - FakeClock: a settable clock for token expiry tests
  - user_store / product_store: fresh stores per test
  - api: an ApiHarness (TestClient plus helpers) on a fresh DB per test

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool, and because the
product store joins against the users table created by the user store.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares one
in-memory instance across all connections in the same process.

The DEBUG env var must be set before api.main is imported so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: Set DEBUG before any api/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.accounts import LEGACY_DEFAULT_ADMIN_PASSWORD, seed_bootstrap_admin
from auth.models import User
from auth.store import UserStore
from auth.tokens import SessionIssuer, SessionVerifier, hash_password
from inventory.store import ProductStore

TEST_SECRET = "test-secret-key-0123456789abcdef0123456789abcdef"
ADMIN_EMAIL = "admin@example.com"


class FakeClock:
    """Callable clock whose current time is set by the test."""

    def __init__(self, now: float = 1_700_000_000) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores(db_suffix: str) -> tuple[UserStore, ProductStore]:
    """Create both stores on one named shared-memory SQLite database.

    Args:
        db_suffix: Unique string appended to the DB name so tests don't
                   share state.
    """
    url = f"sqlite:///file:test_inventory_{db_suffix}?mode=memory&cache=shared&uri=true"
    user_store = UserStore(db_url=url)
    product_store = ProductStore(db_url=url)
    return user_store, product_store


def _patch_lifespan(
    user_store: UserStore,
    product_store: ProductStore,
    issuer: SessionIssuer,
    verifier: SessionVerifier,
):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.product_store = product_store
        app.state.session_issuer = issuer
        app.state.session_verifier = verifier
        yield

    return test_lifespan


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def secret_key() -> str:
    return TEST_SECRET


@pytest.fixture
def stores() -> Generator[tuple[UserStore, ProductStore], None, None]:
    user_store, product_store = _make_test_stores(uuid.uuid4().hex)
    yield user_store, product_store
    product_store.close()
    user_store.close()


@pytest.fixture
def user_store(stores) -> UserStore:
    return stores[0]


@pytest.fixture
def product_store(stores) -> ProductStore:
    return stores[1]


@dataclass
class ApiHarness:
    """Everything an integration test needs: client, stores, token helpers."""

    client: TestClient
    user_store: UserStore
    product_store: ProductStore
    issuer: SessionIssuer
    admin_id: int

    def token_for(self, email: str) -> str:
        user = self.user_store.get_by_email(email)
        assert user is not None, f"no such user {email}"
        return self.issuer.create_token(user)

    def auth(self, token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def signup_and_login(self, name: str, email: str, password: str) -> tuple[int, str]:
        """Register through the API and return (user_id, token)."""
        resp = self.client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 201, resp.text
        resp = self.client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        data = resp.json()
        return data["userId"], data["token"]


@pytest.fixture
def api() -> Generator[ApiHarness, None, None]:
    """Yield an ApiHarness on a fresh database with a seeded admin.

    The admin is seeded with the legacy well-known password -- acceptable
    only because this database lives for one test.
    """
    user_store, product_store = _make_test_stores(uuid.uuid4().hex)
    result = seed_bootstrap_admin(user_store, email=ADMIN_EMAIL, password=LEGACY_DEFAULT_ADMIN_PASSWORD)
    issuer = SessionIssuer(user_store, secret_key=TEST_SECRET)
    verifier = SessionVerifier(secret_key=TEST_SECRET)

    app.router.lifespan_context = _patch_lifespan(user_store, product_store, issuer, verifier)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiHarness(
            client=client,
            user_store=user_store,
            product_store=product_store,
            issuer=issuer,
            admin_id=result.user_id,
        )

    product_store.close()
    user_store.close()


@pytest.fixture
def make_user(user_store: UserStore):
    """Factory fixture: insert a user directly into user_store and return it."""

    def _make(name: str, email: str, is_admin: bool = False) -> User:
        uid = user_store.create_user(
            User(name=name, email=email, password_hash=hash_password("pw12345"), is_admin=is_admin)
        )
        return user_store.get_by_id(uid)

    return _make
