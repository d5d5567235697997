"""Shared fixtures for the Twilio client test suite."""

import json

import httpx
import pytest

from fastapi_twilio_client.config.configuration import Configuration
from fastapi_twilio_client.config.settings import get_settings


@pytest.fixture
def auth_token_config() -> Configuration:
    """Twilio:Client configured for auth token credentials."""
    return Configuration({
        "Twilio:Client:AccountSid": "AC1",
        "Twilio:Client:AuthToken": "tok1",
    })


@pytest.fixture
def api_key_config() -> Configuration:
    """Twilio:Client configured for API key credentials."""
    return Configuration({
        "Twilio:Client:AccountSid": "AC1",
        "Twilio:Client:ApiKeySid": "SK1",
        "Twilio:Client:ApiKeySecret": "sec1",
    })


@pytest.fixture
def appsettings_file(tmp_path):
    """Create a temp appsettings.json file and return its path."""
    data = {
        "Twilio": {
            "AuthToken": "top-level-token",
            "Client": {
                "AccountSid": "ACfile",
                "Region": "au1",
                "Edge": "sydney",
            },
        }
    }
    path = tmp_path / "appsettings.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


@pytest.fixture
def http_client():
    """A real httpx.Client whose requests are answered by a recording handler."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"sid": "SM123", "status": "queued"})

    client = httpx.Client(transport=httpx.MockTransport(handler))
    client.requests = requests
    yield client
    client.close()


@pytest.fixture
def override_settings(monkeypatch):
    """Factory fixture: set env vars and clear settings cache.

    Usage:
        override_settings(CONFIG_PATH="/tmp/appsettings.json", LOG_LEVEL="DEBUG")
    """
    def _override(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(key.upper(), str(value))
        # Clear lru_cache so Settings re-reads env
        get_settings.cache_clear()

    yield _override

    # Always clear cache on teardown so other tests get fresh settings
    get_settings.cache_clear()
