"""
tests/conftest.py -- Shared test fixtures for Gatekeeper.

This module provides:
  - FrozenClock: a controllable clock for token expiry tests
  - hasher / store / issuer / service: unit-level building blocks with
    bcrypt at its minimum cost (4 rounds) so the suite stays fast
  - api_client: TestClient with a patched lifespan and an admin JWT

Design: Named shared-memory SQLite URIs (not plain :memory:) are used for the
API fixture because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread. Unit tests run on one thread and use plain :memory:.

DEBUG and BCRYPT_ROUNDS must be set before any core import so get_settings()
auto-generates SECRET_KEY instead of raising, and hashes cheaply.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

# CRITICAL: Set DEBUG before any auth/core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app
from auth.models import Role
from auth.passwords import PasswordHasher
from auth.service import AuthService
from auth.store import AccountStore
from auth.tokens import TokenIssuer
from core.config import Settings

TEST_SECRET = "test-secret-key-that-is-long-enough-0123456789"
LIFETIME = 3600


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


# ---------------------------------------------------------------------------
# Unit-level fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def store() -> Generator[AccountStore, None, None]:
    s = AccountStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def issuer(clock: FrozenClock) -> TokenIssuer:
    return TokenIssuer(secret_key=TEST_SECRET, lifetime_seconds=LIFETIME, issuer="gatekeeper", clock=clock)


@pytest.fixture
def service(store: AccountStore, hasher: PasswordHasher, issuer: TokenIssuer) -> AuthService:
    return AuthService(store=store, hasher=hasher, issuer=issuer)


# ---------------------------------------------------------------------------
# API fixture
# ---------------------------------------------------------------------------


def _patch_lifespan(service: AuthService):
    """Return an async context manager that replaces the real lifespan.

    Wires the pre-built test service into app.state so TestClient routes see
    an isolated test DB rather than the configured database.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.auth_service = service
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api_client() -> Generator[tuple[TestClient, str, Settings], None, None]:
    """Yield (client, token, settings) for API integration tests.

    An admin account "testadmin" / "testpass123" exists before the client
    starts; token is a valid bearer token for it.
    """
    settings = Settings(
        debug=True,
        secret_key=TEST_SECRET,
        bcrypt_rounds=4,
        database_url="sqlite:///file:test_auth_api?mode=memory&cache=shared&uri=true",
        _env_file=None,
    )
    service = AuthService.from_settings(settings)
    service.register("testadmin", "testpass123", Role.ADMIN)
    token = service.issue_token(service.authenticate("testadmin", "testpass123"))

    app.router.lifespan_context = _patch_lifespan(service)

    # base_url host must be one TrustedHostMiddleware accepts.
    with TestClient(app, base_url="http://localhost", raise_server_exceptions=True) as client:
        yield client, token, settings

    service.close()
