"""
FastAPI middleware for request correlation ID tracking.

Reads X-Correlation-ID from the request (or generates one), exposes it on
request.state, puts it in the logging context and echoes it back in the
response headers.
"""
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import set_correlation_id, clear_correlation_id, get_logger

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Attach a correlation ID to every request.

    Usage:
        app.add_middleware(CorrelationIdMiddleware)
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        token = set_correlation_id(correlation_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers[CORRELATION_HEADER] = correlation_id

            logger.debug(
                f"{request.method} {request.url.path} -> {response.status_code}",
                extra={"duration_ms": round((time.perf_counter() - started) * 1000, 1)},
            )
            return response
        finally:
            clear_correlation_id(token)
