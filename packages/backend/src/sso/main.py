"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown: logging, the Redis pool
for pending registrations, and the database engine.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from sso import __version__
from sso.api import api_router
from sso.config import settings
from sso.logging_config import configure_logging
from sso.middleware.request_id import RequestIdMiddleware

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    configure_logging(settings.environment)
    logger.info(
        "sso.starting",
        version=__version__,
        environment=settings.environment,
        storage=settings.storage,
        port=settings.port,
    )

    from sso.storage.redis import close_redis, init_redis

    if settings.storage == "sql":
        try:
            await init_redis(settings.redis_url)
            logger.info("sso.redis_connected", url=settings.redis_url)
        except Exception as e:
            # Pending-registration routes fail until Redis is back
            logger.warning("sso.redis_unavailable", error=str(e))

    yield

    logger.info("sso.shutdown")

    await close_redis()

    from sso.db.engine import engine
    await engine.dispose()


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="SSO",
        description="Identity and access service for students, teachers and admins",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(RequestIdMiddleware)
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: sso.main:app)
app = create_app()
