"""
Forms management module for the PingOne Forms API.

This module lists, downloads and creates forms in a PingOne environment,
translating every failed request into a domain exception that names the
environment and the operation.
"""

import locale
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

import requests

from pingone_forms.core.auth import PingOneAuthenticator
from pingone_forms.core.client import ApiResult, PingOneClient, ResultKind
from pingone_forms.core.config import DEFAULT_API_TIMEOUT, EnvironmentConfig
from pingone_forms.core.exceptions import (
    PingOneAPIError,
    PingOneAuthenticationError,
    PingOneAuthorizationError,
    PingOneClientError,
    PingOneConflictError,
    PingOneNetworkError,
    PingOneNotFoundError,
    PingOneRateLimitError,
    PingOneValidationError,
)

logger = logging.getLogger(__name__)


def form_sort_key(form: "FormSummary") -> Tuple[str, str]:
    """
    Sort key ordering forms by name, ignoring case first.

    Names are collated with the process locale (see locale.setlocale);
    names equal when case-folded fall back to code point order.

    Examples:
        >>> [f.name for f in sorted(forms, key=form_sort_key)]
        ['alpha', 'Beta', 'Zeta']
    """
    return locale.strxfrm(form.name.casefold()), form.name


@dataclass(frozen=True)
class FormSummary:
    """
    Represents a form listed in a PingOne environment.

    Attributes:
        id: The unique identifier of the form.
        name: The form name.
        description: Optional form description.
    """

    id: str
    name: str
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FormSummary":
        """
        Create a FormSummary instance from API response data.

        Args:
            data: Dictionary containing form data from the API.

        Returns:
            FormSummary instance.
        """
        return cls(
            id=data["id"],
            name=str(data.get("name") or ""),
            description=data.get("description"),
        )


class FormsManager:
    """
    Manager for PingOne forms.

    Every operation builds its own PingOneClient for the target
    environment, so each one starts with a token taken from the shared
    cache. Retries for 429/5xx happen inside the client; this class only
    classifies the final outcome.

    Attributes:
        authenticator: Authenticator shared by all operations.
        timeout: API request timeout in seconds.

    Examples:
        >>> manager = FormsManager(PingOneAuthenticator())
        >>> forms = manager.list_forms(environment)
        >>> for form in forms:
        ...     print(f"Form: {form.name} (ID: {form.id})")
    """

    def __init__(
        self,
        authenticator: PingOneAuthenticator,
        session: Optional[requests.Session] = None,
        timeout: int = DEFAULT_API_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.authenticator = authenticator
        self.timeout = timeout
        self._session = session or requests.Session()
        self._sleep = sleep

    def create_client(self, environment: EnvironmentConfig) -> PingOneClient:
        return PingOneClient(
            environment,
            self.authenticator,
            session=self._session,
            timeout=self.timeout,
            sleep=self._sleep,
        )

    @staticmethod
    def _forms_path(environment: EnvironmentConfig) -> str:
        return f"/environments/{environment.env_id}/forms"

    def list_forms(self, environment: EnvironmentConfig) -> List[FormSummary]:
        """
        List every form in an environment.

        Follows the "next" links of the paged collection until the last
        page, then sorts the summaries by name.

        Args:
            environment: Environment to list.

        Returns:
            List of FormSummary objects sorted by name.

        Raises:
            PingOneAuthenticationError: If the token is rejected.
            PingOneAuthorizationError: If listing forms is not permitted.
            PingOneNotFoundError: If the forms endpoint does not exist.
            PingOneRateLimitError: If 429/5xx responses persist after retries.
            PingOneNetworkError: If the API could not be reached.
            PingOneAPIError: For any other API failure.
        """
        client = self.create_client(environment)
        forms: List[FormSummary] = []
        visited = set()
        path: Optional[str] = self._forms_path(environment)

        while path:
            if path in visited:
                logger.warning("Pagination loop detected at %s, stopping", path)
                break
            visited.add(path)

            logger.debug("Fetching: %s", path)
            result = client.get(path)
            if not result.ok:
                self._raise_list_error(environment, result)

            data = result.body if isinstance(result.body, dict) else {}
            page = (data.get("_embedded") or {}).get("forms") or []
            for item in page:
                if not isinstance(item, dict) or not item.get("id"):
                    logger.warning("Skipping form without an id in %s: %r", environment.name, item)
                    continue
                forms.append(FormSummary.from_dict(item))

            next_href = ((data.get("_links") or {}).get("next") or {}).get("href")
            path = client.resolve_link(next_href) if next_href else None

        logger.debug("Listed %d form(s) in %s", len(forms), environment.name)
        return sorted(forms, key=form_sort_key)

    def download_form(self, environment: EnvironmentConfig, form_id: str) -> Dict[str, Any]:
        """
        Download the full definition of a form.

        Args:
            environment: Environment holding the form.
            form_id: ID of the form.

        Returns:
            The form JSON exactly as returned by the API.

        Raises:
            PingOneNotFoundError: If the form does not exist.
            PingOneAPIError: If the response body is not a JSON object.
            PingOneClientError: For the other failures listed in list_forms().
        """
        logger.debug("Downloading form %s from environment %s...", form_id, environment.name)
        client = self.create_client(environment)
        path = f"{self._forms_path(environment)}/{form_id}"
        logger.debug("Making GET request to: %s%s", client.base_url, path)

        result = client.get(path)
        if not result.ok:
            self._raise_download_error(environment, form_id, result)
        if not isinstance(result.body, dict):
            raise PingOneAPIError(
                f"Invalid response for form {form_id} from {environment.name}: expected a JSON object",
                environment=environment.name,
                status_code=result.status_code,
                response_body=result.body,
            )

        logger.debug("Successfully downloaded form %s", form_id)
        return result.body

    def upload_form(self, environment: EnvironmentConfig, form_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a form from a JSON payload.

        Args:
            environment: Target environment.
            form_data: Form definition, without environment-specific fields.

        Returns:
            The platform response, typically the created form.

        Raises:
            PingOneValidationError: If the payload is rejected (400).
            PingOneConflictError: If the name is already taken (409).
            PingOneClientError: For the other failures listed in list_forms().
        """
        form_name = form_data.get("name")
        logger.debug('Uploading form "%s" to environment %s...', form_name, environment.name)
        client = self.create_client(environment)
        path = self._forms_path(environment)
        logger.debug("Making POST request to: %s%s", client.base_url, path)

        result = client.post(path, json_data=form_data)
        if not result.ok:
            self._raise_upload_error(environment, form_name, result)

        logger.debug('Successfully uploaded form "%s"', form_name)
        return result.body if result.body is not None else {}

    @staticmethod
    def _raise_list_error(environment: EnvironmentConfig, result: ApiResult) -> None:
        name = environment.name
        if result.kind is ResultKind.UNAUTHORIZED:
            raise _api_error(
                PingOneAuthenticationError,
                f"Authentication failed for {name}: Token may have expired",
                environment,
                result,
            )
        if result.kind is ResultKind.FORBIDDEN:
            raise _api_error(
                PingOneAuthorizationError,
                f"Access denied for {name}: Insufficient permissions to list forms",
                environment,
                result,
            )
        if result.kind is ResultKind.NOT_FOUND:
            raise _api_error(
                PingOneNotFoundError,
                f"Forms endpoint not found for {name}",
                environment,
                result,
            )
        _raise_common(environment, result, "fetching forms from")

    @staticmethod
    def _raise_download_error(
        environment: EnvironmentConfig, form_id: str, result: ApiResult
    ) -> None:
        name = environment.name
        if result.kind is ResultKind.UNAUTHORIZED:
            raise _api_error(
                PingOneAuthenticationError,
                f"Authentication failed for {name}: Token may have expired",
                environment,
                result,
            )
        if result.kind is ResultKind.FORBIDDEN:
            raise _api_error(
                PingOneAuthorizationError,
                f"Access denied for {name}: Insufficient permissions to download form {form_id}",
                environment,
                result,
            )
        if result.kind is ResultKind.NOT_FOUND:
            raise _api_error(
                PingOneNotFoundError,
                f"Form {form_id} not found in {name}",
                environment,
                result,
            )
        _raise_common(environment, result, f"downloading form {form_id} from")

    @staticmethod
    def _raise_upload_error(
        environment: EnvironmentConfig, form_name: Any, result: ApiResult
    ) -> None:
        name = environment.name
        if result.kind is ResultKind.UNAUTHORIZED:
            raise _api_error(
                PingOneAuthenticationError,
                f"Authentication failed for {name}: Token may have expired",
                environment,
                result,
            )
        if result.kind is ResultKind.FORBIDDEN:
            raise _api_error(
                PingOneAuthorizationError,
                f"Access denied for {name}: Insufficient permissions to upload forms",
                environment,
                result,
            )
        if result.kind is ResultKind.BAD_REQUEST:
            raise _api_error(
                PingOneValidationError,
                f'Invalid form data for "{form_name}" in {name}: {result.message}',
                environment,
                result,
            )
        if result.kind is ResultKind.CONFLICT:
            raise _api_error(
                PingOneConflictError,
                f'Form "{form_name}" already exists in {name} or there\'s a conflict',
                environment,
                result,
            )
        _raise_common(environment, result, f'uploading form "{form_name}" to')


def _api_error(
    error_class: Type[PingOneClientError],
    message: str,
    environment: EnvironmentConfig,
    result: ApiResult,
) -> PingOneClientError:
    if issubclass(error_class, PingOneAPIError):
        return error_class(
            message,
            environment=environment.name,
            status_code=result.status_code,
            response_body=result.body,
        )
    return error_class(message, environment=environment.name, status_code=result.status_code)


def _raise_common(environment: EnvironmentConfig, result: ApiResult, action: str) -> None:
    """Raise for the outcomes every operation treats the same way."""
    name = environment.name
    if result.kind is ResultKind.NETWORK_ERROR:
        raise PingOneNetworkError(
            f"Network error while {action} {name}: {result.message}",
            environment=name,
        )
    if result.kind.is_retryable:
        raise _api_error(
            PingOneRateLimitError,
            f"API error {action} {name} after retries: {result.message}",
            environment,
            result,
        )
    raise _api_error(
        PingOneAPIError,
        f"API error {action} {name}: {result.message}",
        environment,
        result,
    )
