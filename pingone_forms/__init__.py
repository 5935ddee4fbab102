"""
PingOne Forms migration library.

A Python client and command line tool to export forms from one PingOne
environment and import them into another, using OAuth 2.0 client
credentials authentication.

Main Components:
    - PingOneAuthenticator: OAuth 2.0 client credentials with a token cache
    - PingOneClient: HTTP client with retry on rate limiting and server errors
    - FormsManager: list, download and create forms
    - export_forms / import_forms: ordered, continue-on-error batches
    - Custom exceptions for detailed error handling

Quick Start:
    >>> from pingone_forms import FormsManager, PingOneAuthenticator, load_environments
    >>>
    >>> environments = load_environments("environments.json")
    >>> manager = FormsManager(PingOneAuthenticator())
    >>> for form in manager.list_forms(environments[0]):
    ...     print(form.name)
"""

__version__ = "1.0.0"

# Core functionality
from pingone_forms.core import (
    AppConfig,
    EnvironmentConfig,
    PingOneAPIError,
    PingOneAuthenticationError,
    PingOneAuthenticator,
    PingOneAuthorizationError,
    PingOneClient,
    PingOneClientError,
    PingOneConfigurationError,
    PingOneConflictError,
    PingOneNetworkError,
    PingOneNotFoundError,
    PingOneRateLimitError,
    PingOneStorageError,
    PingOneTokenError,
    PingOneValidationError,
    TokenCache,
    load_environments,
)

# Forms functionality
from pingone_forms.forms import (
    FormSummary,
    FormsManager,
    TransferResult,
    export_forms,
    import_forms,
)
from pingone_forms.storage import FormStore, LocalFormFile

__all__ = [
    "AppConfig",
    "EnvironmentConfig",
    "load_environments",
    "PingOneAuthenticator",
    "TokenCache",
    "PingOneClient",
    "FormSummary",
    "FormsManager",
    "TransferResult",
    "export_forms",
    "import_forms",
    "FormStore",
    "LocalFormFile",
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
