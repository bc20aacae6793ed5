"""
Shared pytest fixtures for nestcam tests.
"""
from unittest.mock import MagicMock, patch

import httpx
import pytest

from nestcam.core.config import Settings
from tests.fakes import FakeNestApi


@pytest.fixture
def fake_api():
    return FakeNestApi()


@pytest.fixture
def http_client(fake_api):
    """AsyncClient whose requests are answered by fake_api."""
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler))


@pytest.fixture
def settings():
    """Settings with defaults, independent of the caller's environment."""
    with patch.dict("os.environ", {}, clear=True):
        return Settings()


@pytest.fixture
def camera_options():
    return {
        "nest_id": "foo",
        "refresh_token": "foo",
        "api_key": "foo",
        "client_id": "foo",
    }


@pytest.fixture
def mock_settings():
    """Fixture to mock get_settings for modules that read it at call time."""
    mock = MagicMock()
    mock.local_timezone = "UTC"
    mock.snapshot_dir = "assets"
    mock.http_timeout = 5.0

    with patch("nestcam.utils.datetime_utils.get_settings", return_value=mock), patch(
        "nestcam.utils.snapshot_storage.get_settings", return_value=mock
    ):
        yield mock
