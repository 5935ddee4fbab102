"""
Custom exceptions for PingOne Forms operations.

This module defines a hierarchy of custom exceptions that provide
detailed error information for the different failure scenarios met while
authenticating against, reading from and writing to PingOne environments.
Every exception names the environment it happened in, so an operator
working across several environments can tell them apart.
"""

from typing import Any, Optional


class PingOneClientError(Exception):
    """
    Base exception for all PingOne Forms errors.

    All exceptions raised by the library inherit from this class,
    allowing for broad exception handling if needed.

    Attributes:
        environment: Display name of the environment involved, if any.
        status_code: HTTP status code of the failed exchange, if any.

    Examples:
        >>> try:
        ...     manager.list_forms(environment)
        ... except PingOneClientError as e:
        ...     print(f"PingOne error: {e}")
    """

    def __init__(
        self,
        message: str,
        environment: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.environment = environment
        self.status_code = status_code


class PingOneConfigurationError(PingOneClientError, ValueError):
    """
    Raised when the environments file or application settings are invalid.

    It is also a ValueError so callers treating bad configuration as a
    value problem keep working.
    """


class PingOneStorageError(PingOneClientError):
    """Raised when a local form file cannot be read or written."""


class PingOneAuthenticationError(PingOneClientError):
    """
    Raised when authentication fails.

    This exception is raised when the client-credentials exchange is
    rejected, or when the API refuses a bearer token (expired or invalid).

    Examples:
        >>> try:
        ...     authenticator.get_access_token(environment)
        ... except PingOneAuthenticationError as e:
        ...     print(f"Auth failed with status {e.status_code}: {e}")
    """


class PingOneTokenError(PingOneAuthenticationError):
    """
    Raised when the token endpoint answers with an unusable payload.

    It is a subclass of PingOneAuthenticationError to maintain the
    exception hierarchy.
    """


class PingOneAuthorizationError(PingOneClientError):
    """Raised when the worker application lacks permission (HTTP 403)."""


class PingOneNetworkError(PingOneClientError):
    """Raised when no HTTP response was received (connection error, timeout)."""


class PingOneAPIError(PingOneClientError):
    """
    Raised when API requests fail.

    Attributes:
        status_code: HTTP status code from the failed request, if available.
        response_body: Response body from the failed request, if available.

    Examples:
        >>> try:
        ...     manager.download_form(environment, "missing-id")
        ... except PingOneAPIError as e:
        ...     print(f"API error {e.status_code}: {e}")
    """

    def __init__(
        self,
        message: str,
        environment: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Any = None,
    ):
        super().__init__(message, environment=environment, status_code=status_code)
        self.response_body = response_body


class PingOneNotFoundError(PingOneAPIError):
    """Raised when the requested form (or the forms endpoint) does not exist."""


class PingOneValidationError(PingOneAPIError):
    """Raised when the platform rejects a form payload (HTTP 400)."""


class PingOneConflictError(PingOneAPIError):
    """Raised when a form name collides with an existing form (HTTP 409)."""


class PingOneRateLimitError(PingOneAPIError):
    """
    Raised when rate limiting or server errors persist after all retries.

    HTTP 429 and 5xx responses are retried by the client; this is only
    surfaced once the retries are exhausted.
    """
