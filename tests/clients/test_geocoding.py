import time
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from tenacity import wait_none

from geocache.clients.geocoding import (
    GEOCODING_URL,
    REVERSE_GEOCODING_URL,
    GeocodingClient,
)
from geocache.clients.resilience import (
    AuthError,
    CircuitBreaker,
    CircuitOpenError,
    CircuitState,
    PermanentAPIError,
    SchemaChangeError,
    TransientAPIError,
)
from geocache.keys import InvalidKeyError
from geocache.models.geocoding import ProviderResponse

FORWARD_DATA = {
    "data": [
        {
            "latitude": 48.8584,
            "longitude": 2.2945,
            "label": "Eiffel Tower, Paris, France",
            "name": "Eiffel Tower",
            "country": "France",
            "confidence": 1,
        },
    ],
}


def _make_response(data: object, status_code: int = 200) -> MagicMock:
    """Build a mock httpx.Response whose .json() returns *data*."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = data
    return response


def _patch_client(mock_client: AsyncMock):
    patcher = patch("geocache.clients.geocoding.httpx.AsyncClient")
    mock_cls = patcher.start()
    mock_cls.return_value.__aenter__ = AsyncMock(return_value=mock_client)
    mock_cls.return_value.__aexit__ = AsyncMock(return_value=False)
    return patcher, mock_cls


@pytest.fixture
def http():
    """Patch httpx.AsyncClient; yields the mock client used inside ``async with``."""
    mock_client = AsyncMock()
    patcher, mock_cls = _patch_client(mock_client)
    mock_client.cls = mock_cls
    yield mock_client
    patcher.stop()


class TestGeocode:
    async def test_returns_provider_response(self, http):
        http.get.return_value = _make_response(FORWARD_DATA)
        client = GeocodingClient("fake-key")

        result = await client.geocode("Eiffel Tower")

        assert isinstance(result, ProviderResponse)
        assert result.data[0].label == "Eiffel Tower, Paris, France"
        assert result.data[0].latitude == 48.8584
        http.get.assert_awaited_once_with(
            GEOCODING_URL,
            params={"access_key": "fake-key", "query": "Eiffel Tower"},
        )

    async def test_uses_configured_url_and_timeout(self, http):
        http.get.return_value = _make_response(FORWARD_DATA)
        client = GeocodingClient("k", geocoding_url="http://local/fwd", timeout=2.5)

        await client.geocode("x")

        http.cls.assert_called_once_with(timeout=2.5)
        assert http.get.await_args.args[0] == "http://local/fwd"

    async def test_empty_match_list(self, http):
        http.get.return_value = _make_response({"data": [[]]})
        client = GeocodingClient("fake-key")

        result = await client.geocode("nowhere")

        assert result.data == []

    @pytest.mark.parametrize("address", ["", "   "])
    async def test_blank_address_rejected_without_request(self, http, address):
        client = GeocodingClient("fake-key")

        with pytest.raises(InvalidKeyError):
            await client.geocode(address)

        http.get.assert_not_awaited()

    async def test_401_raises_auth_error(self, http):
        http.get.return_value = _make_response({"error": {}}, status_code=401)
        client = GeocodingClient("bad-key")

        with pytest.raises(AuthError):
            await client.geocode("Paris")

    async def test_permanent_error_not_retried(self, http):
        http.get.return_value = _make_response({"error": {}}, status_code=422)
        client = GeocodingClient("fake-key")

        with pytest.raises(PermanentAPIError, match="422"):
            await client.geocode("Paris")

        assert http.get.await_count == 1
        assert client.breaker.state == CircuitState.CLOSED

    async def test_missing_data_key_raises_schema_change(self, http):
        http.get.return_value = _make_response({"results": []})
        client = GeocodingClient("fake-key")

        with pytest.raises(SchemaChangeError, match="data"):
            await client.geocode("Paris")

    async def test_logs_request(self, http, caplog):
        http.get.return_value = _make_response(FORWARD_DATA)
        client = GeocodingClient("fake-key")

        with caplog.at_level("INFO", logger="geocache.clients.geocoding"):
            await client.geocode("Paris")

        assert "Fetching geocoding data for address: Paris" in caplog.text


class TestReverseGeocode:
    async def test_sends_coordinate_query(self, http):
        http.get.return_value = _make_response(FORWARD_DATA)
        client = GeocodingClient("fake-key")

        result = await client.reverse_geocode(48.8584, 2.2945)

        assert result.data[0].label == "Eiffel Tower, Paris, France"
        http.get.assert_awaited_once_with(
            REVERSE_GEOCODING_URL,
            params={"access_key": "fake-key", "query": "48.8584,2.2945"},
        )


class TestCircuitBreaking:
    async def test_open_circuit_sheds_calls(self, http):
        breaker = CircuitBreaker("test", fail_max=1, reset_timeout=60.0)
        breaker._state = CircuitState.OPEN
        breaker._last_failure_time = time.monotonic()
        client = GeocodingClient("fake-key", breaker=breaker)

        with pytest.raises(CircuitOpenError):
            await client.geocode("Paris")

        http.get.assert_not_awaited()

    def test_default_breaker_per_client(self):
        a = GeocodingClient("k")
        b = GeocodingClient("k")
        assert a.breaker is not b.breaker
        assert a.breaker.name == "geocoding"


class TestTransportErrors:
    async def test_transport_error_retried_then_transient(self, http):
        http.get.side_effect = httpx.ConnectError("refused")
        client = GeocodingClient("fake-key")

        # Skip tenacity's exponential backoff between attempts
        with patch.object(GeocodingClient._fetch.retry, "wait", wait_none()):
            with pytest.raises(TransientAPIError, match="unreachable"):
                await client.geocode("Paris")

        assert http.get.await_count == 3
