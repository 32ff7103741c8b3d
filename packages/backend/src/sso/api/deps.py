"""Service wiring for route handlers.

Learn: Each request gets an AuthService built from per-request pieces
(a DB session) and process-wide ones (the Redis pool, the signing key).
Tests swap any of these with app.dependency_overrides — typically the
two stores for in-memory ones and the hasher for a cheap cost factor.

With SSO_STORAGE=memory both stores are process-local singletons; that
mode exists for trying the API without Postgres or Redis.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from sso.auth.dependencies import get_token_issuer
from sso.auth.jwt import TokenIssuer
from sso.auth.password import PasswordHasher
from sso.config import settings
from sso.db.engine import get_db
from sso.services.auth_service import AuthService
from sso.storage.base import IdentityStore, PendingStore
from sso.storage.memory import MemoryIdentityStore, MemoryPendingStore
from sso.storage.redis import RedisPendingStore, get_redis
from sso.storage.sql import SqlIdentityStore

_memory_identities = MemoryIdentityStore()
_memory_pending = MemoryPendingStore(ttl=settings.pending_ttl)


def get_identity_store(db: AsyncSession = Depends(get_db)) -> IdentityStore:
    if settings.storage == "memory":
        return _memory_identities
    return SqlIdentityStore(db)


def get_pending_store() -> PendingStore:
    if settings.storage == "memory":
        return _memory_pending
    return RedisPendingStore(get_redis(), ttl=settings.pending_ttl)


def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_rounds)


def get_auth_service(
    identities: IdentityStore = Depends(get_identity_store),
    pending: PendingStore = Depends(get_pending_store),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(
        identities=identities,
        pending=pending,
        hasher=hasher,
        tokens=tokens,
        token_ttl=settings.token_ttl,
    )
