"""
Error Taxonomy - Consistent error codes across the application.

Usage:
    from mcpadvisor.config.errors import ErrorCode, McpAdvisorError

    raise McpAdvisorError(ErrorCode.PROVIDER_FAILED, "Compass returned 502")
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for machine-readable error responses."""

    # Provider errors
    PROVIDER_FAILED = "PROVIDER_FAILED"
    PROVIDER_TIMEOUT = "PROVIDER_TIMEOUT"

    # Search backend errors
    BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"

    # Search errors
    SEARCH_INVALID_QUERY = "SEARCH_INVALID_QUERY"

    # Configuration errors
    CONFIGURATION_INCOMPLETE = "CONFIGURATION_INCOMPLETE"

    # Upstream data errors
    MALFORMED_UPSTREAM_DATA = "MALFORMED_UPSTREAM_DATA"

    # Storage errors
    STORAGE_CONNECTION_FAILED = "STORAGE_CONNECTION_FAILED"
    STORAGE_READ_FAILED = "STORAGE_READ_FAILED"
    STORAGE_WRITE_FAILED = "STORAGE_WRITE_FAILED"

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"


class McpAdvisorError(Exception):
    """Base exception with error code support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to API-friendly dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


# Domain-specific exceptions for cleaner imports
class ProviderError(McpAdvisorError):
    """A single search provider failed (network error, non-2xx status)."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.PROVIDER_FAILED, message, details)


class ProviderTimeoutError(McpAdvisorError):
    """A search provider did not answer within its time budget."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.PROVIDER_TIMEOUT, message, details)


class BackendUnavailableError(McpAdvisorError):
    """A search backend could not serve the request."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.BACKEND_UNAVAILABLE, message, details)


class ConfigurationError(McpAdvisorError):
    """Required configuration (addresses, credentials) is missing."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.CONFIGURATION_INCOMPLETE, message, details)


class MalformedDataError(McpAdvisorError):
    """Catalog or source data could not be parsed or validated."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.MALFORMED_UPSTREAM_DATA, message, details)


class SearchError(McpAdvisorError):
    """Search domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.SEARCH_INVALID_QUERY, message, details)


class StorageError(McpAdvisorError):
    """Storage/database errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.STORAGE_CONNECTION_FAILED, message, details)
