"""
Request logging middleware

Assigns a request id (X-Request-Id, generated when absent) and logs one
line per request with method, path, status and duration. Bodies and
headers are never logged.
"""

import logging
import time
from typing import Awaitable, Callable
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.app.utils.redact import redact_secrets_in_string

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        request.state.request_id = request_id

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            f"{request_id} {request.method} "
            f"{redact_secrets_in_string(request.url.path)} "
            f"{response.status_code} {duration_ms:.1f}ms"
        )
        return response
