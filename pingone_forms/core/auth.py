"""
OAuth 2.0 authentication module for the PingOne API.

This module handles token acquisition and caching following the OAuth 2.0
client credentials flow. Tokens are cached per (environment ID, client ID)
pair in an explicit TokenCache owned by the caller.
"""

import base64
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

import requests

from pingone_forms.core.config import DEFAULT_AUTH_TIMEOUT, EnvironmentConfig
from pingone_forms.core.exceptions import (
    PingOneAuthenticationError,
    PingOneAuthorizationError,
    PingOneNetworkError,
    PingOneTokenError,
)

logger = logging.getLogger(__name__)

# Tokens are not reused during the last 30 seconds of their lifetime
EXPIRY_BUFFER_MS = 30_000


def now_millis() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class TokenInfo:
    """
    Represents an OAuth access token and its expiry.

    Attributes:
        access_token: The OAuth access token string.
        expires_at_ms: Epoch milliseconds at which the platform expires the token.
        token_type: The token type (typically "Bearer").

    Examples:
        >>> token_info = TokenInfo(access_token="abc123", expires_at_ms=now_millis() + 3_600_000)
        >>> token_info.is_usable(now_millis())
        True
    """

    access_token: str
    expires_at_ms: int
    token_type: str = "Bearer"

    def is_usable(self, now_ms: int) -> bool:
        """
        Check whether the token can still be handed out.

        A token is usable only while more than 30 seconds remain before
        its expiry.

        Args:
            now_ms: Current time in epoch milliseconds.

        Returns:
            True if the token expires more than 30 seconds after now_ms.
        """
        return self.expires_at_ms - now_ms > EXPIRY_BUFFER_MS


class TokenCache:
    """
    Process-lifetime store of access tokens.

    Entries are keyed by (environment ID, client ID), so two configuration
    entries that differ only by display name share one token. Entries are
    overwritten on refresh and never deleted.

    Attributes:
        clock: Callable returning the current time in epoch milliseconds.
    """

    def __init__(self, clock: Callable[[], int] = now_millis):
        self.clock = clock
        self._tokens: Dict[Tuple[str, str], TokenInfo] = {}

    @staticmethod
    def key_for(environment: EnvironmentConfig) -> Tuple[str, str]:
        return environment.env_id, environment.client_id

    def get(self, environment: EnvironmentConfig) -> Optional[TokenInfo]:
        """Return the cached token if it is still usable, otherwise None."""
        token = self._tokens.get(self.key_for(environment))
        if token and token.is_usable(self.clock()):
            return token
        return None

    def store(self, environment: EnvironmentConfig, access_token: str, expires_in: int) -> TokenInfo:
        """Cache a token that expires expires_in seconds from now."""
        token = TokenInfo(
            access_token=access_token,
            expires_at_ms=self.clock() + int(expires_in) * 1000,
        )
        self._tokens[self.key_for(environment)] = token
        return token

    def peek(self, environment: EnvironmentConfig) -> Optional[TokenInfo]:
        """Return the cached entry regardless of freshness."""
        return self._tokens.get(self.key_for(environment))

    def __len__(self) -> int:
        return len(self._tokens)


class PingOneAuthenticator:
    """
    Handles OAuth 2.0 client credentials authentication for PingOne.

    The authenticator returns a valid bearer token for any environment,
    reusing a cached one while it is fresh and performing a
    client-credentials exchange otherwise. A failed exchange is not retried.

    Attributes:
        cache: TokenCache shared by every environment this authenticator serves.
        timeout: Token request timeout in seconds.

    Examples:
        >>> authenticator = PingOneAuthenticator()
        >>> token = authenticator.get_access_token(environment)
        >>> print(f"Access token: {token[:20]}...")
    """

    def __init__(
        self,
        cache: Optional[TokenCache] = None,
        session: Optional[requests.Session] = None,
        timeout: int = DEFAULT_AUTH_TIMEOUT,
    ):
        self.cache = cache if cache is not None else TokenCache()
        self.timeout = timeout
        self._session = session or requests.Session()

    def get_access_token(self, environment: EnvironmentConfig, force_refresh: bool = False) -> str:
        """
        Get a valid access token, requesting a new one if necessary.

        Args:
            environment: Environment to authenticate against.
            force_refresh: Skip the cache and always request a new token.

        Returns:
            Valid access token string.

        Raises:
            PingOneAuthenticationError: If the credentials are rejected.
            PingOneAuthorizationError: If the application lacks permission.
            PingOneNetworkError: If the token endpoint could not be reached.
            PingOneTokenError: If the token response is malformed.
        """
        if not force_refresh:
            cached = self.cache.get(environment)
            if cached:
                logger.debug("Using cached token for %s", environment.name)
                return cached.access_token

        logger.debug("Requesting new token for %s...", environment.name)
        token = self._acquire_token(environment)
        logger.debug("Successfully obtained token for %s", environment.name)
        return token.access_token

    def _acquire_token(self, environment: EnvironmentConfig) -> TokenInfo:
        credentials = f"{environment.client_id}:{environment.client_secret}"
        encoded = base64.b64encode(credentials.encode("utf-8")).decode("utf-8")
        headers = {
            "Authorization": f"Basic {encoded}",
            "Content-Type": "application/x-www-form-urlencoded",
        }

        try:
            response = self._session.post(
                environment.auth_url,
                data="grant_type=client_credentials",
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise PingOneNetworkError(
                f"Network error while authenticating with {environment.name}: {e}",
                environment=environment.name,
            ) from e

        if not response.ok:
            self._raise_for_status(environment, response)

        try:
            token_data = response.json()
            return self.cache.store(
                environment,
                access_token=token_data["access_token"],
                expires_in=int(token_data["expires_in"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise PingOneTokenError(
                f"Invalid token response from {environment.name}: {e}",
                environment=environment.name,
                status_code=response.status_code,
            ) from e

    @staticmethod
    def _raise_for_status(environment: EnvironmentConfig, response: requests.Response) -> None:
        status_code = response.status_code

        if status_code == 401:
            raise PingOneAuthenticationError(
                f"Authentication failed for {environment.name}: Invalid client credentials",
                environment=environment.name,
                status_code=status_code,
            )
        if status_code == 403:
            raise PingOneAuthorizationError(
                f"Access denied for {environment.name}: Insufficient permissions",
                environment=environment.name,
                status_code=status_code,
            )

        error_message = f"HTTP {status_code}"
        try:
            error_body = response.json()
            if isinstance(error_body, dict):
                error_message = error_body.get("error_description", error_message)
        except ValueError:
            error_message = response.text or error_message

        raise PingOneAuthenticationError(
            f"Failed to authenticate with {environment.name}: {error_message}",
            environment=environment.name,
            status_code=status_code,
        )


def get_access_token(environment: EnvironmentConfig, authenticator: PingOneAuthenticator) -> str:
    """Return a bearer token for environment using the given authenticator."""
    return authenticator.get_access_token(environment)
