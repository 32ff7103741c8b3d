"""Redis pending store — PendingStore over redis.asyncio.

Learn: Each pending registration is one JSON string under
`pending_user:{id}`, written with an expiry (7 days by default), so
Redis reclaims forgotten requests without any cleanup job.

Atomicity comes from single Redis commands:
- DEL returns how many keys it removed → 0 means "not found"
- GETDEL reads and removes in one step → of two concurrent approvals,
  only one ever sees the record
Listing uses SCAN rather than KEYS so a large backlog never blocks the
server; a key that expires between SCAN and GET is simply skipped.
"""

import json
from datetime import datetime, timedelta, timezone

import redis.asyncio as aioredis

from sso.domain.models import PendingUser
from sso.storage import InvalidUserDataError, NoValueForKeyError
from sso.storage.base import PendingStore

KEY_PREFIX = "pending_user:"


def pending_key(pending_id: str) -> str:
    return f"{KEY_PREFIX}{pending_id}"


def _encode(pending: PendingUser) -> str:
    return json.dumps(pending.to_dict())


def _decode(raw: str | bytes) -> PendingUser:
    try:
        return PendingUser.from_dict(json.loads(raw))
    except (ValueError, KeyError, TypeError) as e:
        raise InvalidUserDataError(f"malformed pending record: {e}") from e


class RedisPendingStore(PendingStore):
    def __init__(self, client: aioredis.Redis, ttl: timedelta = timedelta(days=7)):
        self.client = client
        self.ttl = ttl

    async def save(self, pending: PendingUser) -> str:
        pending.expires_at = datetime.now(timezone.utc) + self.ttl
        await self.client.set(
            pending_key(pending.id),
            _encode(pending),
            ex=int(self.ttl.total_seconds()),
        )
        return pending.id

    async def get(self, pending_id: str) -> PendingUser:
        raw = await self.client.get(pending_key(pending_id))
        if raw is None:
            raise NoValueForKeyError(pending_id)
        return _decode(raw)

    async def list_all(self) -> list[PendingUser]:
        users = []
        async for key in self.client.scan_iter(match=f"{KEY_PREFIX}*", count=100):
            raw = await self.client.get(key)
            if raw is None:
                continue
            users.append(_decode(raw))
        return users

    async def delete(self, pending_id: str) -> None:
        deleted = await self.client.delete(pending_key(pending_id))
        if not deleted:
            raise NoValueForKeyError(pending_id)

    async def take(self, pending_id: str) -> PendingUser:
        raw = await self.client.getdel(pending_key(pending_id))
        if raw is None:
            raise NoValueForKeyError(pending_id)
        return _decode(raw)

    async def restore(self, pending: PendingUser) -> None:
        if pending.expires_at is None:
            remaining = self.ttl
        else:
            remaining = pending.expires_at - datetime.now(timezone.utc)
        remaining_ms = int(remaining.total_seconds() * 1000)
        if remaining_ms <= 0:
            return
        await self.client.set(
            pending_key(pending.id), _encode(pending), px=remaining_ms, nx=True
        )


# ─── Connection pool ─────────────────────────────────────

# Global Redis connection pool (initialized in lifespan)
_redis: aioredis.Redis | None = None


async def init_redis(url: str) -> aioredis.Redis:
    """Initialize the Redis connection pool and verify it answers."""
    global _redis
    _redis = aioredis.from_url(url, encoding="utf-8", decode_responses=True)
    await _redis.ping()
    return _redis


async def close_redis() -> None:
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None


def get_redis() -> aioredis.Redis:
    """Get the Redis connection (must be initialized first)."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis
