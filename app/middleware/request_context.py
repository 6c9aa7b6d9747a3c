"""
Request context middleware.
Assigns each request an id and logs one line per request with its outcome.
"""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
import logging
import re
import time
import uuid

logger = logging.getLogger(__name__)

# Caller-supplied ids are echoed back in headers and logs
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Reuses a well-formed ``X-Request-ID`` header or generates a uuid4."""

    async def dispatch(self, request: Request, call_next):
        incoming = request.headers.get("X-Request-ID", "")
        request_id = incoming if _REQUEST_ID_PATTERN.match(incoming) else str(uuid.uuid4())
        request.state.request_id = request_id

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            f"Request {request_id}: {request.method} {request.url.path} -> {response.status_code} ({duration_ms}ms)",
            extra={
                'request_id': request_id,
                'method': request.method,
                'path': request.url.path,
                'status_code': response.status_code,
                'duration_ms': duration_ms,
                'client_ip': request.client.host if request.client else 'unknown',
            }
        )

        response.headers["X-Request-ID"] = request_id
        return response
