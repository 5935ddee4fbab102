"""
Core functionality for the PingOne API client.

This module contains the core components:
- Authentication (OAuth 2.0 client credentials, token cache)
- Resilient HTTP client
- Configuration management
- Exception definitions
"""

from pingone_forms.core.auth import PingOneAuthenticator, TokenCache, TokenInfo
from pingone_forms.core.client import ApiResult, PingOneClient, ResultKind, create_client
from pingone_forms.core.config import AppConfig, EnvironmentConfig, load_environments
from pingone_forms.core.exceptions import (
    PingOneAPIError,
    PingOneAuthenticationError,
    PingOneAuthorizationError,
    PingOneClientError,
    PingOneConfigurationError,
    PingOneConflictError,
    PingOneNetworkError,
    PingOneNotFoundError,
    PingOneRateLimitError,
    PingOneStorageError,
    PingOneTokenError,
    PingOneValidationError,
)

__all__ = [
    "PingOneAuthenticator",
    "TokenCache",
    "TokenInfo",
    "PingOneClient",
    "ApiResult",
    "ResultKind",
    "create_client",
    "AppConfig",
    "EnvironmentConfig",
    "load_environments",
    "PingOneClientError",
    "PingOneConfigurationError",
    "PingOneStorageError",
    "PingOneAuthenticationError",
    "PingOneTokenError",
    "PingOneAuthorizationError",
    "PingOneNetworkError",
    "PingOneAPIError",
    "PingOneNotFoundError",
    "PingOneValidationError",
    "PingOneConflictError",
    "PingOneRateLimitError",
]
