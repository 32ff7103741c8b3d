"""Request ID middleware — correlate every log line of one request.

Learn: The ID comes from an incoming X-Request-ID header (so a caller's
trace continues here) or is generated. It is bound into structlog's
contextvars together with the method and path, which the Auth service's
per-operation loggers pick up automatically, and echoed back on the
response.
"""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(HEADER) or uuid.uuid4().hex

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response: Response = await call_next(request)
        response.headers[HEADER] = request_id
        return response
