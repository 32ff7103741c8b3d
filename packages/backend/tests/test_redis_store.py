"""Redis pending store tests.

Learn: These talk to a real Redis (SSO_REDIS_URL, default
redis://localhost:6379/0) on a throwaway key namespace and are skipped
when no server answers. Record encoding is covered without Redis.
"""

import asyncio
import uuid
from datetime import timedelta

import pytest
import pytest_asyncio
import redis.asyncio as aioredis
from redis.exceptions import ConnectionError as RedisConnectionError

from sso.config import settings
from sso.domain.models import BirthDate, PendingUser, Role
from sso.storage import InvalidUserDataError, NoValueForKeyError
from sso.storage.redis import KEY_PREFIX, RedisPendingStore, _decode, _encode, pending_key


def _pending(email="ivan@example.com", **kw) -> PendingUser:
    return PendingUser(
        id=f"test-{uuid.uuid4().hex}",
        email=email,
        pass_hash=b"$2b$04$hash\x00\xff",
        surname="Petrov",
        birth_date=BirthDate(2004, 5, 17),
        role=Role.STUDENT,
        meta={"group": "IU7-42"},
        **kw,
    )


# ═══════════════════════════════════════════════════════════
# Encoding (no Redis needed)
# ═══════════════════════════════════════════════════════════


def test_key_layout():
    assert pending_key("abc") == "pending_user:abc"
    assert KEY_PREFIX == "pending_user:"


def test_encode_keeps_binary_hash():
    pending = _pending()

    decoded = _decode(_encode(pending))

    assert decoded.pass_hash == pending.pass_hash
    assert decoded.role is Role.STUDENT
    assert decoded.birth_date == BirthDate(2004, 5, 17)
    assert decoded.meta == {"group": "IU7-42"}


@pytest.mark.parametrize(
    "raw",
    ["not json", "{}", '{"id": "x", "email": "a", "role": "dean", "created_at": "2026-01-01"}'],
)
def test_decode_malformed(raw):
    with pytest.raises(InvalidUserDataError):
        _decode(raw)


# ═══════════════════════════════════════════════════════════
# Against a live Redis
# ═══════════════════════════════════════════════════════════


@pytest_asyncio.fixture()
async def redis_client():
    client = aioredis.from_url(settings.redis_url, decode_responses=True)
    try:
        await client.ping()
    except (RedisConnectionError, OSError):
        await client.aclose()
        pytest.skip("Redis not available")
    yield client
    async for key in client.scan_iter(match=f"{KEY_PREFIX}test-*"):
        await client.delete(key)
    await client.aclose()


@pytest.fixture()
def store(redis_client):
    return RedisPendingStore(redis_client, ttl=timedelta(days=7))


@pytest.mark.asyncio
async def test_save_sets_ttl(store, redis_client):
    pending = _pending()

    pending_id = await store.save(pending)

    ttl = await redis_client.ttl(pending_key(pending_id))
    assert 7 * 24 * 3600 - 5 < ttl <= 7 * 24 * 3600
    assert pending.expires_at is not None


@pytest.mark.asyncio
async def test_get_and_list(store):
    pending = _pending()
    await store.save(pending)

    got = await store.get(pending.id)
    listed = [p.id for p in await store.list_all()]

    assert got.email == "ivan@example.com"
    assert pending.id in listed


@pytest.mark.asyncio
async def test_delete_twice(store):
    pending = _pending()
    await store.save(pending)

    await store.delete(pending.id)

    with pytest.raises(NoValueForKeyError):
        await store.delete(pending.id)
    with pytest.raises(NoValueForKeyError):
        await store.get(pending.id)


@pytest.mark.asyncio
async def test_take_is_exclusive(store):
    pending = _pending()
    await store.save(pending)

    results = await asyncio.gather(
        store.take(pending.id), store.take(pending.id), return_exceptions=True
    )

    assert sum(isinstance(r, PendingUser) for r in results) == 1
    assert sum(isinstance(r, NoValueForKeyError) for r in results) == 1


@pytest.mark.asyncio
async def test_restore_keeps_remaining_ttl(store, redis_client):
    pending = _pending()
    await store.save(pending)
    taken = await store.take(pending.id)

    await store.restore(taken)

    assert (await store.get(pending.id)).email == "ivan@example.com"
    assert await redis_client.ttl(pending_key(pending.id)) <= 7 * 24 * 3600


@pytest.mark.asyncio
async def test_short_ttl_expires(redis_client):
    store = RedisPendingStore(redis_client, ttl=timedelta(seconds=1))
    pending = _pending()
    await store.save(pending)

    await asyncio.sleep(1.5)

    with pytest.raises(NoValueForKeyError):
        await store.get(pending.id)
