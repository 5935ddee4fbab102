"""
Integration tests against real PingOne environments.

These tests verify that the configured worker applications can
authenticate and list forms. They are read-only: nothing is created.

Requires an environments file (environments.json in the working
directory, or the path in PINGONE_FORMS_ENVIRONMENTS). Run with:
    pytest -m integration
"""

import pytest

from pingone_forms import AppConfig, FormsManager, PingOneAuthenticator, PingOneConfigurationError


@pytest.fixture(scope="module")
def environments():
    """Load the configured environments, skipping when none are available."""
    config = AppConfig.from_env()
    if not config.environments_file.exists():
        pytest.skip(f"No environments file at {config.environments_file}")
    try:
        loaded = config.load_environments()
    except PingOneConfigurationError as e:
        pytest.skip(f"Environments file is not usable: {e}")
    if not loaded:
        pytest.skip("Environments file lists no environments")
    return loaded


@pytest.fixture(scope="module")
def authenticator():
    return PingOneAuthenticator()


@pytest.mark.integration
class TestConnection:
    """Test suite for live PingOne connectivity."""

    def test_token_acquired(self, environments, authenticator):
        """Each environment's worker application obtains a bearer token."""
        for environment in environments:
            token = authenticator.get_access_token(environment)
            assert token
            assert authenticator.cache.peek(environment) is not None

    def test_cached_token_reused(self, environments, authenticator):
        environment = environments[0]
        first = authenticator.get_access_token(environment)
        assert authenticator.get_access_token(environment) == first

    def test_list_forms(self, environments, authenticator):
        """
        Listing forms works for every environment.

        This verifies that:
        - The bearer token is accepted by the API
        - Pagination completes
        - Summaries come back sorted by name
        """
        manager = FormsManager(authenticator)
        for environment in environments:
            forms = manager.list_forms(environment)
            assert isinstance(forms, list)
            assert all(form.id for form in forms)
