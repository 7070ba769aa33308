"""Request logging middleware.

Logs each HTTP request (method, path, status, latency, request id) and puts the
request id on request.state so handlers can echo it in ApiResponse.

Log format:
    INFO [POST] /api/v1/settlements -> 200 (18ms) req_1a2b3c4d5e6f
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("bk.request")


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = request.headers.get("x-request-id") or (
            f"req_{uuid.uuid4().hex[:12]}"
        )

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "[%s] %s -> unhandled error %s",
                request.method, request.url.path, request.state.request_id,
            )
            raise
        elapsed_ms = (time.perf_counter() - started) * 1000

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "[%s] %s -> %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.state.request_id,
        )
        response.headers["X-Request-ID"] = request.state.request_id
        return response
