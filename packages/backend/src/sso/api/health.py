"""Health check endpoint.

Learn: Reports whether the server is up and whether the two stores it
depends on (Postgres for identities, Redis for pending requests)
answer. With SSO_STORAGE=memory there is nothing external to check.
"""

from fastapi import APIRouter
from sqlalchemy import text

from sso import __version__
from sso.config import settings
from sso.db.engine import engine
from sso.storage.redis import get_redis

router = APIRouter()


@router.get("/health")
async def health_check():
    """Check server health and dependency connectivity."""
    checks = {"server": "ok", "version": __version__, "storage": settings.storage}
    if settings.storage == "memory":
        return {"status": "healthy", **checks}

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["postgres"] = "ok"
    except Exception as e:
        checks["postgres"] = f"error: {e}"

    try:
        await get_redis().ping()
        checks["redis"] = "ok"
    except Exception as e:
        checks["redis"] = f"error: {e}"

    status = "healthy" if all(
        checks[k] == "ok" for k in ("postgres", "redis")
    ) else "degraded"

    return {"status": status, **checks}
