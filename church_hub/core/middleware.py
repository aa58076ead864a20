"""
Application middleware for logging, security headers and rate limiting.

This module contains custom middleware classes for handling various
aspects of request/response processing in production environments.
"""

import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from church_hub.core.exceptions import RateLimitedError
from church_hub.core.responses import error_response

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all requests and responses with timing information.

    Logs the method, path, status code, processing time and client IP
    of every request.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        client_ip = request.client.host if request.client else "unknown"

        logger.info(f"Request started: {request.method} {request.url.path} from {client_ip}")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request failed: {request.method} {request.url.path} "
                f"- Error: {str(e)} "
                f"- Time: {process_time:.3f}s",
                exc_info=True,
            )
            raise

        process_time = time.time() - start_time
        logger.info(
            f"Request completed: {request.method} {request.url.path} "
            f"- Status: {response.status_code} "
            f"- Time: {process_time:.3f}s"
        )
        response.headers["X-Process-Time"] = str(process_time)
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add common security headers to all responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        response.headers.update(
            {
                "X-Content-Type-Options": "nosniff",
                "X-Frame-Options": "DENY",
                "X-XSS-Protection": "1; mode=block",
                "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
                "Referrer-Policy": "strict-origin-when-cross-origin",
            }
        )
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-process sliding window rate limiter keyed by client IP.

    Counters live in this process only; each worker limits independently.
    """

    def __init__(self, app, calls: int = 100, period: int = 60):
        """
        Args:
            app: ASGI application
            calls: Number of calls allowed per period
            period: Time period in seconds
        """
        super().__init__(app)
        self.calls = calls
        self.period = period
        self.clients: dict[str, list[float]] = {}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        client_ip = request.client.host if request.client else "unknown"
        current_time = time.time()
        window_start = current_time - self.period

        self.clients = {
            ip: timestamps
            for ip, timestamps in self.clients.items()
            if any(ts > window_start for ts in timestamps)
        }
        recent = [ts for ts in self.clients.get(client_ip, []) if ts > window_start]

        if len(recent) >= self.calls:
            logger.warning(f"Rate limit exceeded for {client_ip}")
            error = RateLimitedError()
            return error_response(
                status_code=error.status_code,
                message=error.message,
                error_code=error.error_code,
            )

        recent.append(current_time)
        self.clients[client_ip] = recent
        return await call_next(request)
