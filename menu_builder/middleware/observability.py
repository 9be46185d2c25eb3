from __future__ import annotations

import logging
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from menu_builder.core.request_context import bind_request, reset_request

logger = logging.getLogger(__name__)
REQUEST_ID_HEADER = "X-Request-ID"


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Assigns a request id and writes one access-log line per request."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        token = bind_request(request_id)

        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            user = getattr(request.state, "user", None)
            logger.info(
                "request completed",
                extra={
                    "user_id": _as_text(getattr(user, "id", None)),
                    "company_id": _as_text(getattr(user, "company_id", None)),
                    "endpoint": request.url.path,
                    "method": request.method,
                    "status_code": status_code,
                    "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                },
            )
            reset_request(token)


def _as_text(value) -> str | None:
    return str(value) if value is not None else None
