"""
AI Engine middleware.
Handles CORS preflight, security headers, the request deadline, request
logging and performance recording.
"""
import asyncio
import logging
import time

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from shared.error_models import ErrorCode, create_error_response
from shared.performance_monitor import PerformanceMonitor

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
}


def add_standard_headers(response: Response) -> Response:
    for name, value in CORS_HEADERS.items():
        response.headers[name] = value
    for name, value in SECURITY_HEADERS.items():
        response.headers[name] = value
    return response


def _error_json(error_code: ErrorCode, message: str, status_code: int) -> JSONResponse:
    error_response, status = create_error_response(error_code, message, status_code=status_code)
    return JSONResponse(status_code=status, content=error_response.model_dump(mode="json"))


class RequestProcessingMiddleware(BaseHTTPMiddleware):
    """
    Middleware applied to every request.

    - OPTIONS answered with 200 and CORS headers, no further processing
    - Deadline on the downstream handler, 504 when exceeded
    - Unhandled exceptions become a 500 without a stack trace
    - CORS and security headers on every response
    """

    def __init__(self, app: ASGIApp, monitor: PerformanceMonitor, timeout_seconds: float = 30.0):
        super().__init__(app)
        self.monitor = monitor
        self.timeout_seconds = timeout_seconds

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return add_standard_headers(Response(status_code=200))

        start = time.perf_counter()
        try:
            response = await asyncio.wait_for(call_next(request), timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"{request.method} {request.url.path} exceeded {self.timeout_seconds}s deadline")
            response = _error_json(ErrorCode.TIMEOUT, "Request timed out", 504)
        except Exception:
            logger.exception(f"Unhandled error on {request.method} {request.url.path}")
            response = _error_json(ErrorCode.INTERNAL_ERROR, "Internal server error", 500)

        duration_ms = (time.perf_counter() - start) * 1000
        self.monitor.record_request(request.url.path, duration_ms, is_error=response.status_code >= 500)
        logger.info(f"{request.method} {request.url.path} {response.status_code} {duration_ms:.1f}ms")

        return add_standard_headers(response)
