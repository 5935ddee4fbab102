"""
Pytest configuration and shared fixtures.

Unit tests never touch the network: requests sessions are replaced by
FakeSession objects that return scripted responses, and the token cache
clock and the retry sleep are replaced by recording fakes.
"""

import http.client
import json

import pytest
import requests

from pingone_forms import EnvironmentConfig, FormsManager, PingOneAuthenticator, TokenCache

START_MS = 1_700_000_000_000


def make_response(status_code=200, json_body=None, text=None, url="https://api.pingone.test/v1"):
    """Build a requests.Response carrying a JSON (or text) body."""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.reason = http.client.responses.get(status_code, "")
    response.encoding = "utf-8"
    if json_body is not None:
        response._content = json.dumps(json_body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    else:
        response._content = (text or "").encode("utf-8")
    return response


def token_response(access_token="token-1", expires_in=3600):
    return make_response(200, {"access_token": access_token, "expires_in": expires_in, "token_type": "Bearer"})


class FakeSession:
    """
    Stand-in for requests.Session.

    Responses (or exceptions to raise) are consumed in order; every call is
    recorded in ``calls``.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, now_ms=START_MS):
        self.now_ms = now_ms

    def __call__(self):
        return self.now_ms

    def advance(self, ms):
        self.now_ms += ms


class FakeSleep:
    """Records requested delays instead of sleeping."""

    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def environment() -> EnvironmentConfig:
    return EnvironmentConfig(
        name="Dev US",
        env_id="11111111-2222-3333-4444-555555555555",
        client_id="aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee",
        client_secret="s3cret",
        tld="com",
    )


@pytest.fixture
def other_environment() -> EnvironmentConfig:
    return EnvironmentConfig(
        name="Prod EU",
        env_id="66666666-7777-8888-9999-000000000000",
        client_id="ffffffff-eeee-dddd-cccc-bbbbbbbbbbbb",
        client_secret="other-secret",
        tld="eu",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeper() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def auth_session() -> FakeSession:
    """Token endpoint session with one successful token response queued."""
    return FakeSession(token_response())


@pytest.fixture
def api_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def authenticator(auth_session, clock) -> PingOneAuthenticator:
    return PingOneAuthenticator(cache=TokenCache(clock=clock), session=auth_session)


@pytest.fixture
def manager(authenticator, api_session, sleeper) -> FormsManager:
    return FormsManager(authenticator, session=api_session, sleep=sleeper)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (require real PingOne credentials)"
    )
