"""
Request Context Middleware for FastAPI.

Wraps every request to:
- assign a request id (reused from ``X-Request-ID`` when the client sends one)
- apply the general per-IP rate limit to API routes
- measure latency, log the request and flag slow ones
"""

import time
import uuid
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from contentmagic.core.errors import ErrorCode
from contentmagic.core.logging_config import get_logger
from contentmagic.core.monitoring import log_api_request
from contentmagic.server.core.constant import API_PREFIX
from contentmagic.server.core.rate_limit import client_ip
from contentmagic.server.exception_handlers import error_response

logger = get_logger(__name__)

SLOW_REQUEST_MS = 1000

# Stripe retries webhooks on its own schedule
RATE_LIMIT_EXEMPT = (f"{API_PREFIX}/subscription/webhook",)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Request id, general rate limit and access logging."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        method = request.method
        path = request.url.path

        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        request.state.start_time = start_time

        limiters = getattr(request.app.state, "rate_limiters", None)
        if (
            limiters is not None
            and limiters.enabled
            and method != "OPTIONS"
            and path.startswith(API_PREFIX)
            and not path.startswith(RATE_LIMIT_EXEMPT)
        ):
            key = client_ip(request)
            if not limiters.general.hit(key):
                retry_after = limiters.general.retry_after(key)
                response = error_response(
                    request,
                    429,
                    ErrorCode.RATE_LIMIT_EXCEEDED.value,
                    "Too many requests, please try again later",
                    {"retryAfter": retry_after},
                    headers={"Retry-After": str(retry_after)},
                )
                response.headers["X-Request-ID"] = request_id
                log_api_request(method=method, path=path, status_code=429, duration_ms=0.0)
                return response

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.error(
                f"API request failed: {method} {path}",
                exc_info=True,
                extra={"method": method, "path": path, "duration_ms": duration_ms, "error": str(e)},
            )
            log_api_request(method=method, path=path, status_code=500, duration_ms=duration_ms)
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000
        log_api_request(method=method, path=path, status_code=response.status_code, duration_ms=duration_ms)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{duration_ms:.2f}"

        if duration_ms > SLOW_REQUEST_MS:
            logger.warning(
                f"Slow API request: {method} {path} took {duration_ms:.2f}ms",
                extra={"method": method, "path": path, "duration_ms": duration_ms, "status_code": response.status_code},
            )
        return response
