"""
Shared fixtures for the proxy tests.

The upstream httpx.AsyncClient is replaced by an AsyncMock stored on
``app.state``; the lifespan is not run by a bare TestClient so the mock is
never overwritten.
"""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from kling_proxy.app.config import Settings
from kling_proxy.app.main import create_app


def make_settings(**overrides) -> Settings:
    values = {
        "APP_TOKEN": None,
        "FREEPIK_API_KEY": None,
        "FREEPIK_BASE_URL": "https://upstream.test/v1/ai/image-to-video",
        "SERVICE_NAME": "kling-backend-proxy",
        "ALLOWED_ORIGINS": "*",
        "LOG_LEVEL": "INFO",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def mock_upstream_client():
    """Stand-in for the shared upstream HTTP client"""
    return AsyncMock()


@pytest.fixture
def build_client(mock_upstream_client):
    """Factory creating a TestClient for an app built with the given settings"""
    def _build(**overrides) -> TestClient:
        app = create_app(make_settings(**overrides))
        app.state.upstream_client = mock_upstream_client
        return TestClient(app)
    return _build


@pytest.fixture
def client(build_client):
    """Client for an app with a server-side API key and no gate"""
    return build_client(FREEPIK_API_KEY="server-key")
