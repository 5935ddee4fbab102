"""
Resilient PingOne API client.

This module provides an HTTP client bound to one environment and one
bearer token. Every request goes through a bounded exponential-backoff
retry loop for rate limiting (429) and server errors (5xx). Outcomes are
returned as typed ApiResult values instead of raised exceptions, so the
resource layer can translate them into domain errors.
"""

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlsplit

import requests

from pingone_forms.core.auth import PingOneAuthenticator
from pingone_forms.core.config import DEFAULT_API_TIMEOUT, EnvironmentConfig

logger = logging.getLogger(__name__)


class ResultKind(enum.Enum):
    """Classification of one HTTP exchange."""

    SUCCESS = "success"
    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    HTTP_ERROR = "http_error"
    NETWORK_ERROR = "network_error"

    @property
    def is_retryable(self) -> bool:
        return self in (ResultKind.RATE_LIMITED, ResultKind.SERVER_ERROR)


_STATUS_KINDS = {
    400: ResultKind.BAD_REQUEST,
    401: ResultKind.UNAUTHORIZED,
    403: ResultKind.FORBIDDEN,
    404: ResultKind.NOT_FOUND,
    409: ResultKind.CONFLICT,
    429: ResultKind.RATE_LIMITED,
}


def classify_status(status_code: int) -> ResultKind:
    """Map an HTTP status code to a ResultKind."""
    if 200 <= status_code < 300:
        return ResultKind.SUCCESS
    if status_code >= 500:
        return ResultKind.SERVER_ERROR
    return _STATUS_KINDS.get(status_code, ResultKind.HTTP_ERROR)


@dataclass
class ApiResult:
    """
    Outcome of a request after retries.

    Attributes:
        kind: Classification of the outcome.
        status_code: HTTP status code, or None when no response was received.
        body: Parsed JSON body (or raw text when the body is not JSON).
        message: Platform error message, or the transport error text.
    """

    kind: ResultKind
    status_code: Optional[int] = None
    body: Any = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.kind is ResultKind.SUCCESS


@dataclass
class RetryState:
    """Retry bookkeeping for a single logical request."""

    attempt_count: int = 0
    started_at: float = field(default_factory=time.monotonic)


def _extract_message(body: Any, fallback: str) -> str:
    if isinstance(body, dict):
        for key in ("message", "error_description", "error"):
            if body.get(key):
                return str(body[key])
        details = body.get("details")
        if isinstance(details, list) and details and isinstance(details[0], dict):
            if details[0].get("message"):
                return str(details[0]["message"])
    elif isinstance(body, str) and body:
        return body
    return fallback


class PingOneClient:
    """
    HTTP client for one PingOne environment.

    The client fetches its bearer token once, at construction, through the
    authenticator; it does not refresh the token during its lifetime.

    Key Features:
    - Requests are resolved against https://api.pingone.<tld>/v1
    - 429 and 5xx responses are retried up to 3 times, waiting 1s, 2s, 4s
    - Each request carries its own RetryState
    - The sleep function is injectable for deterministic tests

    Attributes:
        MAX_RETRIES: Maximum number of retries per request (3).
        BASE_DELAY: Delay before the first retry, in seconds (1.0).
        DEFAULT_TIMEOUT: Default request timeout in seconds (30).

    Examples:
        >>> client = PingOneClient(environment, authenticator)
        >>> result = client.get(f"/environments/{environment.env_id}/forms")
        >>> if result.ok:
        ...     print(result.body["_embedded"]["forms"])
    """

    MAX_RETRIES = 3
    BASE_DELAY = 1.0
    DEFAULT_TIMEOUT = DEFAULT_API_TIMEOUT

    def __init__(
        self,
        environment: EnvironmentConfig,
        authenticator: PingOneAuthenticator,
        session: Optional[requests.Session] = None,
        timeout: int = DEFAULT_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
        max_retries: int = MAX_RETRIES,
        base_delay: float = BASE_DELAY,
    ):
        """
        Initialize the client and obtain its bearer token.

        Args:
            environment: Environment the client is bound to.
            authenticator: Authenticator used to obtain the bearer token.
            session: Optional requests session (shared connection pool).
            timeout: Request timeout in seconds.
            sleep: Function used to wait between retries.
            max_retries: Maximum retries for 429/5xx responses.
            base_delay: Delay before the first retry, doubled on each retry.

        Raises:
            PingOneAuthenticationError: If the token cannot be obtained.
        """
        self.environment = environment
        self.base_url = environment.api_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.base_delay = base_delay
        self._sleep = sleep
        self._session = session or requests.Session()
        self._token = authenticator.get_access_token(environment)

    @property
    def base_path(self) -> str:
        return urlsplit(self.base_url).path.rstrip("/")

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def resolve_link(self, href: str) -> str:
        """
        Convert a HAL link into a path relative to the base URL.

        Absolute links are reduced to path and query; a leading base path
        (e.g. "/v1") is stripped so the result can be passed to request().

        Examples:
            >>> client.resolve_link("https://api.pingone.eu/v1/environments/x/forms?cursor=2")
            '/environments/x/forms?cursor=2'
        """
        parts = urlsplit(href)
        path = parts.path or "/"
        base_path = self.base_path
        if base_path and (path == base_path or path.startswith(base_path + "/")):
            path = path[len(base_path):] or "/"
        if not path.startswith("/"):
            path = "/" + path
        if parts.query:
            path = f"{path}?{parts.query}"
        return path

    def _send(self, method: str, url: str, json_data: Any = None) -> ApiResult:
        """Send one HTTP request and classify the outcome without raising."""
        request_kwargs: Dict[str, Any] = {
            "headers": self._get_headers(),
            "timeout": self.timeout,
        }
        if json_data is not None:
            request_kwargs["json"] = json_data

        try:
            response = self._session.request(method, url, **request_kwargs)
        except requests.exceptions.RequestException as e:
            return ApiResult(kind=ResultKind.NETWORK_ERROR, message=str(e))

        try:
            body = response.json() if response.content else None
        except ValueError:
            body = response.text

        kind = classify_status(response.status_code)
        message = None
        if kind is not ResultKind.SUCCESS:
            message = _extract_message(body, f"HTTP {response.status_code} {response.reason or ''}".strip())

        return ApiResult(kind=kind, status_code=response.status_code, body=body, message=message)

    def request(self, method: str, path: str, json_data: Any = None) -> ApiResult:
        """
        Make an authenticated request, retrying on 429 and 5xx responses.

        Args:
            method: HTTP method string (e.g., "GET", "POST").
            path: Path relative to the base URL (e.g., "/environments/<id>/forms").
            json_data: Optional JSON body.

        Returns:
            ApiResult of the last attempt.
        """
        url = f"{self.base_url}{path}"
        state = RetryState()

        while True:
            result = self._send(method, url, json_data=json_data)
            if not result.kind.is_retryable or state.attempt_count >= self.max_retries:
                if result.kind.is_retryable:
                    logger.debug(
                        "Giving up on %s %s after %d retries (%.1fs)",
                        method,
                        path,
                        state.attempt_count,
                        time.monotonic() - state.started_at,
                    )
                return result

            state.attempt_count += 1
            delay = self.base_delay * 2 ** (state.attempt_count - 1)
            logger.warning(
                "%s from %s, retrying request (attempt %d/%d) after %.0fms...",
                result.status_code,
                self.environment.name,
                state.attempt_count,
                self.max_retries,
                delay * 1000,
            )
            self._sleep(delay)

    def get(self, path: str) -> ApiResult:
        """Make a GET request to the PingOne API."""
        return self.request("GET", path)

    def post(self, path: str, json_data: Any = None) -> ApiResult:
        """Make a POST request to the PingOne API."""
        return self.request("POST", path, json_data=json_data)


def create_client(
    environment: EnvironmentConfig,
    authenticator: PingOneAuthenticator,
    **kwargs: Any,
) -> PingOneClient:
    """Build a client bound to environment and a freshly obtained token."""
    return PingOneClient(environment, authenticator, **kwargs)
