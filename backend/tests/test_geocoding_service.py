"""
CatAPI Backend — Geocoding Service Tests
==========================================

What:  Response and failure mapping of GeocodingService.
How:   httpx.MockTransport stands in for the provider; no network access.
"""

import httpx
import pytest

from catapi.exceptions import GeocodingError, ValidationError
from catapi.services.geocoding_service import GeocodingService
from catapi.utils.geo import Coordinates


def _service(handler) -> GeocodingService:
    return GeocodingService(base_url="http://geocoder.test", transport=httpx.MockTransport(handler))


class TestGeocode:
    @pytest.mark.asyncio
    async def test_first_match_is_used(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=[{"lat": "60.1699", "lon": "24.9384"}, {"lat": "0", "lon": "0"}])

        result = await _service(handler).geocode("Helsinki")

        assert result == Coordinates(lat=60.1699, lng=24.9384)
        assert seen["params"]["q"] == "Helsinki"
        assert seen["params"]["format"] == "json"

    @pytest.mark.asyncio
    async def test_no_match_is_validation_error(self):
        service = _service(lambda request: httpx.Response(200, json=[]))
        with pytest.raises(ValidationError) as exc_info:
            await service.geocode("Nowhere at all")
        assert exc_info.value.field == "address"

    @pytest.mark.asyncio
    async def test_blank_address(self):
        service = _service(lambda request: httpx.Response(500))
        with pytest.raises(ValidationError):
            await service.geocode("   ")

    @pytest.mark.asyncio
    async def test_provider_error_status(self):
        service = _service(lambda request: httpx.Response(503))
        with pytest.raises(GeocodingError) as exc_info:
            await service.geocode("Helsinki")
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_network_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(GeocodingError):
            await _service(handler).geocode("Helsinki")

    @pytest.mark.asyncio
    async def test_malformed_match(self):
        service = _service(lambda request: httpx.Response(200, json=[{"display_name": "x"}]))
        with pytest.raises(GeocodingError):
            await service.geocode("Helsinki")
