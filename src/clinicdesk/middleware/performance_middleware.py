"""
Performance tracking middleware for monitoring request/response metrics
"""
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.structured_logger import get_logger

logger = get_logger("clinicdesk.http")

SLOW_REQUEST_SECONDS = 1.0


class PerformanceMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log method, path, status and latency for all requests
    """

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        process_time_ms = round(process_time * 1000, 2)

        logger.info(
            "Request handled",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            latency_ms=process_time_ms,
            request_id=getattr(request.state, "request_id", "unknown"),
        )

        response.headers["X-Process-Time"] = str(process_time_ms)

        if process_time > SLOW_REQUEST_SECONDS:
            logger.warning(
                "Slow request",
                method=request.method,
                path=request.url.path,
                latency_ms=process_time_ms,
            )

        return response
