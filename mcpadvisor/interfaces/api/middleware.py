"""
API Middleware - Request/response processing.

Provides:
- Request ID tracking (``X-Request-ID`` in and out)
- Response latency header and access log
- Error envelope for McpAdvisorError and query validation failures
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.middleware.base import BaseHTTPMiddleware

from mcpadvisor.config.errors import ErrorCode, McpAdvisorError

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
LATENCY_HEADER = "X-Response-Time-Ms"

_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.SEARCH_INVALID_QUERY: 400,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.PROVIDER_FAILED: 502,
    ErrorCode.MALFORMED_UPSTREAM_DATA: 502,
    ErrorCode.BACKEND_UNAVAILABLE: 503,
    ErrorCode.CONFIGURATION_INCOMPLETE: 503,
    ErrorCode.STORAGE_CONNECTION_FAILED: 503,
    ErrorCode.STORAGE_READ_FAILED: 503,
    ErrorCode.STORAGE_WRITE_FAILED: 503,
    ErrorCode.PROVIDER_TIMEOUT: 504,
}

Dispatch = Callable[[Request], Awaitable[Response]]


def error_code_to_status(code: ErrorCode) -> int:
    """HTTP status for an error code (500 when unmapped)."""
    return _STATUS_BY_CODE.get(code, 500)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


def _error_response(request: Request, status_code: int, error: dict[str, Any]) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "request_id": _request_id(request)},
    )


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's request ID or mint one, and echo it back."""

    async def dispatch(self, request: Request, call_next: Dispatch) -> Response:
        request.state.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        return response


class LatencyMiddleware(BaseHTTPMiddleware):
    """Add a latency header and write one access log line per request."""

    async def dispatch(self, request: Request, call_next: Dispatch) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers[LATENCY_HEADER] = f"{elapsed_ms:.2f}"
        logger.info(
            "%s %s -> %d in %.2fms request_id=%s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            _request_id(request),
        )
        return response


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Render errors escaping route handlers as a JSON error envelope."""

    async def dispatch(self, request: Request, call_next: Dispatch) -> Response:
        try:
            return await call_next(request)
        except McpAdvisorError as e:
            logger.error(
                "%s: %s request_id=%s details=%s",
                e.code.value,
                e.message,
                _request_id(request),
                e.details,
            )
            return _error_response(request, error_code_to_status(e.code), e.to_dict())
        except ValidationError as e:
            # Raised when a request body passes schema checks but not query rules
            logger.warning("Invalid search query request_id=%s: %s", _request_id(request), e)
            return _error_response(
                request,
                400,
                {
                    "code": ErrorCode.VALIDATION_ERROR.value,
                    "message": "Invalid search query",
                    "details": {"errors": e.errors(include_url=False, include_context=False)},
                },
            )
        except Exception:
            logger.exception("Unhandled error request_id=%s", _request_id(request))
            return _error_response(
                request,
                500,
                {
                    "code": ErrorCode.INTERNAL_ERROR.value,
                    "message": "Internal server error",
                    "details": {},
                },
            )
