"""
Configuration - Application settings, error taxonomy, and backend resolution.
"""

from .backends import BackendConfig, BackendKind, resolve_backend_configs
from .errors import (
    BackendUnavailableError,
    ConfigurationError,
    ErrorCode,
    MalformedDataError,
    McpAdvisorError,
    ProviderError,
    ProviderTimeoutError,
    SearchError,
    StorageError,
)
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Backends
    "BackendKind",
    "BackendConfig",
    "resolve_backend_configs",
    # Errors
    "ErrorCode",
    "McpAdvisorError",
    "ProviderError",
    "ProviderTimeoutError",
    "BackendUnavailableError",
    "ConfigurationError",
    "MalformedDataError",
    "SearchError",
    "StorageError",
]
