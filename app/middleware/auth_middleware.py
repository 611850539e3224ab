"""
Request Middleware Module
=========================

Starlette middleware applied to every request.

Features:
- Request ID generation for tracing
- Request timing and logging
- Security headers
- In-memory rate limiting (global and login)

Note:
    Authentication itself happens in the dependency layer
    (`app.core.dependencies.auth`). The middleware only tags requests.
"""

import time
import uuid
from collections import defaultdict, deque
from typing import Callable, Deque, Dict

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from app.core.config import settings
from app.core.exceptions import RateLimitError
from app.core.logging import get_logger, request_id_context, security_logger, user_id_context

# Initialize logger
logger = get_logger(__name__)

LOGIN_PATH = "/api/auth/login"
PUBLIC_PATHS = {"/", "/health", "/ready", "/docs", "/redoc", "/openapi.json"}


class AuthMiddleware(BaseHTTPMiddleware):
    """
    Request preprocessing middleware.

    Responsibilities:
    - Generate (or accept) a request ID for tracing
    - Expose it as `X-Request-ID` together with `X-Process-Time`
    - Log every completed request with its status and duration
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request_id_context.set(request_id)
        user_id_context.set(None)

        request.state.request_id = request_id
        request.state.user_id = None

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                error=str(e),
                path=request.url.path,
                method=request.method,
            )
            raise

        process_time = time.perf_counter() - start_time
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        self._log_request(request, response, process_time)
        return response

    @staticmethod
    def _is_public_path(path: str) -> bool:
        return path in PUBLIC_PATHS or path.startswith("/uploads/")

    def _log_request(self, request: Request, response: Response, process_time: float) -> None:
        if self._is_public_path(request.url.path):
            return

        log_data = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": round(process_time * 1000, 2),
            "user_id": getattr(request.state, "user_id", None),
            "ip_address": request.client.host if request.client else None,
        }

        if response.status_code >= 500:
            logger.error("request_completed", **log_data)
        elif response.status_code >= 400:
            logger.warning("request_completed", **log_data)
        else:
            logger.info("request_completed", **log_data)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds security headers to all responses.

    Headers added:
    - X-Content-Type-Options: nosniff
    - X-Frame-Options: DENY
    - Referrer-Policy
    - Content-Security-Policy (relaxed for the docs in debug mode)
    - Strict-Transport-Security (in production)
    """

    _DOCS_PATHS = {"/docs", "/redoc", "/openapi.json"}

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # Swagger UI and ReDoc load their assets from cdn.jsdelivr.net
        if settings.DEBUG and request.url.path in self._DOCS_PATHS:
            response.headers["Content-Security-Policy"] = (
                "default-src 'self'; "
                "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
                "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
                "img-src 'self' data: https://cdn.jsdelivr.net https://fastapi.tiangolo.com; "
                "frame-ancestors 'none';"
            )
        else:
            response.headers["Content-Security-Policy"] = (
                "default-src 'self'; "
                "img-src 'self' data:; "
                "style-src 'self' 'unsafe-inline'; "
                "frame-ancestors 'none';"
            )

        if settings.ENVIRONMENT == "production":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding-window rate limiting per client IP.

    Two windows of RATE_LIMIT_WINDOW_SECONDS apply:
    - every `/api` request counts against RATE_LIMIT_REQUESTS
    - login attempts also count against LOGIN_RATE_LIMIT

    Note:
        Counters live in the process. Several workers each keep their own.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self._requests: Dict[str, Deque[float]] = defaultdict(deque)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not settings.RATE_LIMIT_ENABLED or not request.url.path.startswith("/api"):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        window = settings.RATE_LIMIT_WINDOW_SECONDS

        if request.url.path == LOGIN_PATH and request.method == "POST":
            if self._is_rate_limited(f"login:{client_ip}", settings.LOGIN_RATE_LIMIT, window):
                return self._reject(client_ip, request.url.path, window,
                                    "Too many login attempts. Please try again later.")

        if self._is_rate_limited(f"api:{client_ip}", settings.RATE_LIMIT_REQUESTS, window):
            return self._reject(client_ip, request.url.path, window,
                                "Too many requests. Please try again later.")

        return await call_next(request)

    def _is_rate_limited(self, key: str, max_requests: int, window_seconds: int) -> bool:
        """
        Record a hit for `key` and tell whether it exceeds the limit.

        Rejected hits are not recorded.
        """
        now = time.time()
        hits = self._requests[key]
        while hits and hits[0] <= now - window_seconds:
            hits.popleft()

        if len(hits) >= max_requests:
            return True

        hits.append(now)
        return False

    @staticmethod
    def _reject(client_ip: str, path: str, retry_after: int, message: str) -> JSONResponse:
        security_logger.log_rate_limit_exceeded(ip_address=client_ip, endpoint=path)
        error = RateLimitError(retry_after=retry_after, message=message)
        return JSONResponse(
            status_code=error.status_code,
            content={"message": error.message, "details": error.details},
            headers={"Retry-After": str(retry_after)},
        )
