"""
Unit tests for nestcam.infrastructure.external.fetch_source
"""
from unittest.mock import MagicMock

import httpx
import pytest

from nestcam.core.exceptions import MissingCredentialError, TransportError
from nestcam.infrastructure.external import FetchSource, ResponseMode
from tests.fakes import JPEG_BYTES, SAMPLE_EVENTS


def _credentials(token="J1") -> MagicMock:
    credentials = MagicMock()
    if token is None:
        credentials.require_derived_token.side_effect = MissingCredentialError("no jwt")
    else:
        credentials.require_derived_token.return_value = token
    return credentials


def _source(http_client, credentials, **kwargs) -> FetchSource:
    defaults = dict(
        name="test",
        credentials=credentials,
        http_client=http_client,
        base_url="https://nexusapi-us1.dropcam.com",
        path="/cuepoint/foo/2",
    )
    defaults.update(kwargs)
    return FetchSource(**defaults)


class TestExecute:
    """Tests for FetchSource.execute"""

    @pytest.mark.asyncio
    async def test_json_request_with_basic_auth(self, fake_api, http_client):
        source = _source(http_client, _credentials())

        result = await source.execute()

        assert result == SAMPLE_EVENTS
        request = fake_api.event_calls()[0]
        assert request.method == "GET"
        assert request.headers["Authorization"] == "Basic J1"

    @pytest.mark.asyncio
    async def test_static_params_sent_as_query(self, fake_api, http_client):
        source = _source(http_client, _credentials(), params={"start_time": "1", "end_time": "2"})

        await source.execute()

        request = fake_api.event_calls()[0]
        assert request.url.params["start_time"] == "1"
        assert request.url.params["end_time"] == "2"

    @pytest.mark.asyncio
    async def test_callable_params_evaluated_per_call(self, fake_api, http_client):
        counter = iter(range(100))
        source = _source(http_client, _credentials(), params=lambda: {"start_time": str(next(counter))})

        await source.execute()
        await source.execute()

        starts = [r.url.params["start_time"] for r in fake_api.event_calls()]
        assert starts == ["0", "1"]

    @pytest.mark.asyncio
    async def test_bytes_mode_returns_body(self, http_client):
        source = _source(
            http_client,
            _credentials(),
            path="/get_image",
            params={"width": "640", "uuid": "foo"},
            response_mode=ResponseMode.BYTES,
        )

        assert await source.execute() == JPEG_BYTES

    @pytest.mark.asyncio
    async def test_missing_token_raises_and_requests_refresh(self, fake_api, http_client):
        credentials = _credentials(token=None)
        source = _source(http_client, credentials)

        with pytest.raises(MissingCredentialError):
            await source.execute()
        credentials.refresh_in_background.assert_called_once_with()
        assert fake_api.calls == []

    @pytest.mark.asyncio
    async def test_network_error_raises_transport_error_and_rotates(self, fake_api, http_client):
        fake_api.events_error = httpx.ConnectError("Failed to retrieve events")
        credentials = _credentials()
        source = _source(http_client, credentials)

        with pytest.raises(TransportError) as exc_info:
            await source.execute()
        assert str(exc_info.value) == "Failed to retrieve events"
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        credentials.refresh_in_background.assert_called_once_with(force=True)

    @pytest.mark.asyncio
    async def test_http_status_error_carries_status(self, fake_api, http_client):
        fake_api.events_status = 401
        credentials = _credentials()
        source = _source(http_client, credentials, rotate_on_failure=False)

        with pytest.raises(TransportError) as exc_info:
            await source.execute()
        assert exc_info.value.status_code == 401
        credentials.refresh_in_background.assert_called_once_with(force=False)

    @pytest.mark.asyncio
    async def test_undecodable_json_raises_transport_error(self):
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="not json"))
        )
        source = _source(client, _credentials())

        with pytest.raises(TransportError, match="Invalid JSON"):
            await source.execute()

    def test_url_joins_base_and_path(self, http_client):
        source = _source(http_client, _credentials(), base_url="https://host.test/")
        assert source.url == "https://host.test/cuepoint/foo/2"
