"""
Configuration management for PingOne Forms.

This module loads the set of PingOne environments (the credential store)
from a JSON or YAML file, validates every entry, and exposes the
application settings that can come from parameters, environment variables
or a .env file.
"""

import json
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from dotenv import load_dotenv

from pingone_forms.core.exceptions import PingOneConfigurationError

# Load environment variables from .env file
load_dotenv()

PLATFORM_HOST = "pingone"
VALID_TLDS = ("com", "eu", "ca", "asia", "com.au", "sg")
REQUIRED_FIELDS = ("name", "envId", "clientId", "clientSecret", "tld")

DEFAULT_ENVIRONMENTS_FILE = "environments.json"
DEFAULT_FORMS_DIR = "./forms"
DEFAULT_AUTH_TIMEOUT = 10
DEFAULT_API_TIMEOUT = 30

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class EnvironmentConfig:
    """
    Connection parameters of one PingOne environment.

    Attributes:
        name: Display label shown to the operator.
        env_id: Environment (tenant) UUID.
        client_id: OAuth client ID of the worker application.
        client_secret: OAuth client secret of the worker application.
        tld: Region suffix of the PingOne hosts (com, eu, ca, asia, com.au, sg).
    """

    name: str
    env_id: str
    client_id: str
    client_secret: str
    tld: str

    @property
    def auth_url(self) -> str:
        return build_auth_url(self.env_id, self.tld)

    @property
    def api_url(self) -> str:
        return build_api_url(self.tld)

    def __repr__(self) -> str:
        # Keep the secret out of logs and tracebacks
        return (
            f"EnvironmentConfig(name={self.name!r}, env_id={self.env_id!r}, "
            f"client_id={self.client_id!r}, tld={self.tld!r})"
        )


def build_auth_url(env_id: str, tld: str) -> str:
    """Return the token endpoint of an environment."""
    return f"https://auth.{PLATFORM_HOST}.{tld}/{env_id}/as/token"


def build_api_url(tld: str) -> str:
    """Return the management API base URL of a region."""
    return f"https://api.{PLATFORM_HOST}.{tld}/v1"


def load_environments(path: Optional[Union[str, Path]] = None) -> List[EnvironmentConfig]:
    """
    Load and validate the configured environments.

    The file holds a list of objects with ``name``, ``envId``, ``clientId``,
    ``clientSecret`` and ``tld`` keys. JSON is expected unless the file
    ends in ``.yaml`` or ``.yml``; a YAML file may also nest the list under
    an ``environments`` key.

    Args:
        path: Path to the environments file. If None, uses env
              PINGONE_FORMS_ENVIRONMENTS or default "environments.json"
              in the current working directory.

    Returns:
        List of EnvironmentConfig, in file order.

    Raises:
        PingOneConfigurationError: If the file is missing, unreadable or any
            entry is invalid.
    """
    if path is None:
        path = os.getenv("PINGONE_FORMS_ENVIRONMENTS", DEFAULT_ENVIRONMENTS_FILE)
    path = Path(path)
    if not path.is_absolute():
        path = Path.cwd() / path

    if not path.exists():
        raise PingOneConfigurationError(
            f"Missing environments file: {path}. "
            "Create one based on environments.example.json"
        )

    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise PingOneConfigurationError(f"Error reading {path.name}: {e}") from e

    if isinstance(data, dict) and "environments" in data:
        data = data["environments"]

    return parse_environments(data)


def parse_environments(data: Any) -> List[EnvironmentConfig]:
    """
    Validate raw environment entries and convert them to EnvironmentConfig.

    Raises:
        PingOneConfigurationError: If the data is not a list or an entry is invalid.
    """
    if not isinstance(data, list):
        raise PingOneConfigurationError(
            "Environments file must contain a list of environment objects"
        )
    return [_parse_environment(entry, index) for index, entry in enumerate(data)]


def _parse_environment(entry: Any, index: int) -> EnvironmentConfig:
    if not isinstance(entry, dict):
        raise PingOneConfigurationError(f"Environment at index {index} is not a valid object")

    for field in REQUIRED_FIELDS:
        value = entry.get(field)
        if not value or not isinstance(value, str):
            raise PingOneConfigurationError(
                f"Environment at index {index} is missing required field: {field}"
            )

    tld = entry["tld"]
    if tld not in VALID_TLDS:
        raise PingOneConfigurationError(
            f"Environment at index {index} has invalid tld: {tld}. "
            f"Must be one of: {', '.join(VALID_TLDS)}"
        )

    if not _UUID_RE.match(entry["envId"]):
        raise PingOneConfigurationError(
            f"Environment at index {index} has invalid envId format. Must be a valid UUID."
        )

    return EnvironmentConfig(
        name=entry["name"],
        env_id=entry["envId"],
        client_id=entry["clientId"],
        client_secret=entry["clientSecret"],
        tld=tld,
    )


class AppConfig:
    """
    Application settings for the forms CLI.

    Parameters take precedence over environment variables, which take
    precedence over defaults. A .env file in the working directory is
    loaded automatically.

    Attributes:
        environments_file: Path of the environments file.
        forms_dir: Directory holding exported form JSON files.
        log_file: Optional path of a plain-text log file.
        auth_timeout: Token request timeout in seconds (default: 10).
        api_timeout: API request timeout in seconds (default: 30).

    Examples:
        >>> config = AppConfig.from_env()
        >>> environments = config.load_environments()
    """

    def __init__(
        self,
        environments_file: Optional[Union[str, Path]] = None,
        forms_dir: Optional[Union[str, Path]] = None,
        log_file: Optional[Union[str, Path]] = None,
        auth_timeout: int = DEFAULT_AUTH_TIMEOUT,
        api_timeout: int = DEFAULT_API_TIMEOUT,
    ):
        self.environments_file = Path(
            environments_file
            or os.getenv("PINGONE_FORMS_ENVIRONMENTS")
            or DEFAULT_ENVIRONMENTS_FILE
        )
        self.forms_dir = Path(forms_dir or os.getenv("PINGONE_FORMS_DIR") or DEFAULT_FORMS_DIR)
        log_file = log_file or os.getenv("PINGONE_FORMS_LOG_FILE")
        self.log_file = Path(log_file) if log_file else None
        self.auth_timeout = auth_timeout
        self.api_timeout = api_timeout

        self._validate()

    def _validate(self) -> None:
        if self.auth_timeout <= 0:
            raise PingOneConfigurationError("Authentication timeout must be positive")
        if self.api_timeout <= 0:
            raise PingOneConfigurationError("API timeout must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> "AppConfig":
        """Create configuration from environment variables, with optional overrides."""
        return cls(**overrides)

    def load_environments(self) -> List[EnvironmentConfig]:
        """Load the environments file this configuration points to."""
        return load_environments(self.environments_file)
