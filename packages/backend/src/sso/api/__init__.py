"""API route aggregation.

All routers registered here get mounted in main.py. Admin-only routes
carry their own require_admin dependency (see api/auth.py), since the
auth router mixes open and protected endpoints.
"""

from fastapi import APIRouter

from sso.api.auth import router as auth_router
from sso.api.health import router as health_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
