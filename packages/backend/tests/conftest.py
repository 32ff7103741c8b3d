"""Test fixtures — in-memory stores, a cheap hasher, an HTTP client.

Learn: The Auth service only sees the two storage contracts, so most
tests run it over the in-memory stores with a controllable clock (for
TTL expiry) and bcrypt at its minimum cost (4 rounds) to keep hashing
fast. The HTTP client swaps the same pieces in through FastAPI's
dependency_overrides; lifespan does not run under ASGITransport, so
no Redis or Postgres connection is attempted.
"""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from sso.api.deps import get_identity_store, get_password_hasher, get_pending_store
from sso.auth.dependencies import get_token_issuer
from sso.auth.jwt import TokenIssuer
from sso.auth.password import PasswordHasher
from sso.domain.models import Profile
from sso.main import app
from sso.services.auth_service import AuthService
from sso.storage.memory import MemoryIdentityStore, MemoryPendingStore

TEST_SECRET = "test-secret-0123456789-abcdefghij"
TOKEN_TTL = timedelta(hours=24)
PENDING_TTL = timedelta(days=7)


class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self):
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture()
def tokens():
    return TokenIssuer(TEST_SECRET)


@pytest.fixture()
def identities():
    return MemoryIdentityStore()


@pytest.fixture()
def pending_store(clock):
    return MemoryPendingStore(ttl=PENDING_TTL, clock=clock)


@pytest.fixture()
def service(identities, pending_store, hasher, tokens):
    return AuthService(
        identities=identities,
        pending=pending_store,
        hasher=hasher,
        tokens=tokens,
        token_ttl=TOKEN_TTL,
    )


def make_profile(email: str = "ivan@example.com", password: str = "correct-horse") -> Profile:
    return Profile(
        email=email,
        password=password,
        name="Ivan",
        surname="Petrov",
        middle_name="Sergeevich",
        phone_number="+70000000000",
    )


@pytest_asyncio.fixture()
async def client(identities, pending_store, hasher, tokens):
    """HTTP client with stores, hasher and signing key overridden."""
    app.dependency_overrides[get_identity_store] = lambda: identities
    app.dependency_overrides[get_pending_store] = lambda: pending_store
    app.dependency_overrides[get_password_hasher] = lambda: hasher
    app.dependency_overrides[get_token_issuer] = lambda: tokens

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def admin_headers(service, tokens):
    """Authorization header for a freshly registered admin."""
    await service.register_admin(make_profile("root@example.com", "root-password"))
    token = await service.login("root@example.com", "root-password", "admin")
    return {"Authorization": f"Bearer {token}"}
