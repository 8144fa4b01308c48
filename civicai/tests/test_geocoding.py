"""
Unit tests for the Nominatim geocoding client

Tests:
- Address shortening
- Reverse / forward geocoding
- HTTP error mapping
- resolve_address fallbacks
"""
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
import httpx

from civicai.config import Settings
from civicai.exceptions import GeocodingError
from civicai.models.ticket import Coordinates
from civicai.services.geocoding import GeocodingClient, format_coordinates, shorten_address


@pytest.fixture
def geocoder():
    return GeocodingClient(Settings(nominatim_url="https://geo.example.org/", geocoding_timeout=5.0))


@pytest.fixture
def location():
    return Coordinates(lat=12.97161, lng=77.59463)


def json_response(payload):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status = MagicMock()
    return response


class TestHelpers:
    """Formatting helpers"""

    def test_shorten_address(self):
        display = "Main St, Shivajinagar, Bengaluru, Karnataka, 560001, India"
        assert shorten_address(display) == "Main St, Shivajinagar, Bengaluru"

    def test_shorten_short_address(self):
        assert shorten_address("Bengaluru, , India") == "Bengaluru, India"

    def test_format_coordinates(self, location):
        assert format_coordinates(location) == "12.9716, 77.5946"


class TestReverse:
    """reverse geocoding"""

    def test_client_initialization(self, geocoder):
        assert geocoder.base_url == "https://geo.example.org"
        assert geocoder.timeout == 5.0
        assert "User-Agent" in geocoder.headers

    @pytest.mark.asyncio
    async def test_reverse_success(self, geocoder, location):
        with patch("httpx.AsyncClient") as mock_client:
            mock_get = AsyncMock(return_value=json_response({
                "display_name": "Main St, Shivajinagar, Bengaluru, Karnataka, India"
            }))
            mock_client.return_value.__aenter__.return_value.get = mock_get

            address = await geocoder.reverse(location)

            assert address == "Main St, Shivajinagar, Bengaluru"
            url = mock_get.call_args.args[0]
            params = mock_get.call_args.kwargs["params"]
            assert url == "https://geo.example.org/reverse"
            assert params["lat"] == location.lat
            assert params["lon"] == location.lng

    @pytest.mark.asyncio
    async def test_reverse_without_display_name(self, geocoder, location):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=json_response({"error": "Unable to geocode"})
            )

            assert await geocoder.reverse(location) == "12.9716, 77.5946"

    @pytest.mark.asyncio
    async def test_http_error_mapped(self, geocoder, location):
        with patch("httpx.AsyncClient") as mock_client:
            error_response = MagicMock()
            error_response.status_code = 503
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(side_effect=httpx.HTTPStatusError(
                "Unavailable", request=MagicMock(), response=error_response
            ))

            with pytest.raises(GeocodingError, match="503"):
                await geocoder.reverse(location)

    @pytest.mark.asyncio
    async def test_transport_error_mapped(self, geocoder, location):
        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                side_effect=httpx.ConnectError("refused")
            )

            with pytest.raises(GeocodingError):
                await geocoder.reverse(location)


class TestForward:
    """forward geocoding"""

    @pytest.mark.asyncio
    async def test_forward_success(self, geocoder):
        with patch.object(geocoder, "_get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = [{"lat": "12.9716", "lon": "77.5946"}]

            coords = await geocoder.forward("MG Road Bengaluru")

            assert coords == Coordinates(lat=12.9716, lng=77.5946)
            assert mock_get.call_args.args[1]["q"] == "MG Road Bengaluru"

    @pytest.mark.asyncio
    async def test_forward_no_match(self, geocoder):
        with patch.object(geocoder, "_get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = []
            assert await geocoder.forward("nowhere") is None

    @pytest.mark.asyncio
    async def test_forward_malformed(self, geocoder):
        with patch.object(geocoder, "_get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = [{"lat": "north"}]
            with pytest.raises(GeocodingError):
                await geocoder.forward("MG Road")


class TestResolveAddress:
    """resolve_address never raises"""

    @pytest.mark.asyncio
    async def test_no_location(self, geocoder):
        assert await geocoder.resolve_address(None) == "Unknown Location"
        assert await geocoder.resolve_address(Coordinates()) == "Unknown Location"

    @pytest.mark.asyncio
    async def test_failure_uses_coordinates(self, geocoder, location):
        with patch.object(geocoder, "reverse", new_callable=AsyncMock) as mock_reverse:
            mock_reverse.side_effect = GeocodingError("timeout")
            assert await geocoder.resolve_address(location) == "12.9716, 77.5946"

    @pytest.mark.asyncio
    async def test_success(self, geocoder, location):
        with patch.object(geocoder, "reverse", new_callable=AsyncMock) as mock_reverse:
            mock_reverse.return_value = "Main St"
            assert await geocoder.resolve_address(location) == "Main St"
