"""
Pytest configuration and fixtures for TripScout backend tests.

Upstream HTTP is never touched: tests patch httpx.AsyncClient with an
AsyncMock built by the `http_client` factory fixture, and time-dependent code
gets a FakeClock instead of time.monotonic.
"""
import pytest
from unittest.mock import AsyncMock, Mock

import httpx

from app.repos.places_cache import PlacesCache
from app.services.Geocoding_service import GeocodingService
from app.services.Places_service import PlacesService


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_response(payload=None, status_code: int = 200) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload
    if status_code >= 400:
        request = httpx.Request("GET", "https://api.geoapify.com/v2/places")
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            f"Server error '{status_code}'",
            request=request,
            response=httpx.Response(status_code, request=request),
        )
    else:
        response.raise_for_status = Mock()
    return response


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return PlacesCache(ttl_seconds=900, check_period_seconds=120, clock=clock)


@pytest.fixture
def geocoder():
    return GeocodingService(api_key="test-key", base_url="https://geocode.test/search", timeout=5.0)


@pytest.fixture
def service(cache, geocoder):
    return PlacesService(cache, geocoder)


@pytest.fixture
def http_client():
    """
    Factory for a mocked httpx.AsyncClient usable as `async with`.

    Pass `payload` for a 200 JSON body, `status_code` for an error status,
    or `side_effect` to control `get` directly (exception or coroutine function).
    """
    def _build(payload=None, status_code: int = 200, side_effect=None):
        mock_client = AsyncMock()
        mock_client.__aenter__.return_value = mock_client
        mock_client.__aexit__.return_value = None
        if side_effect is not None:
            mock_client.get.side_effect = side_effect
        else:
            mock_client.get.return_value = make_response(payload, status_code)
        return mock_client

    return _build


def feature(place_id=None, name=None, formatted=None, address_line1=None, categories=None) -> dict:
    properties = {}
    if place_id is not None:
        properties["place_id"] = place_id
    if name is not None:
        properties["name"] = name
    if formatted is not None:
        properties["formatted"] = formatted
    if address_line1 is not None:
        properties["address_line1"] = address_line1
    if categories is not None:
        properties["categories"] = categories
    return {"type": "Feature", "properties": properties}


@pytest.fixture
def make_feature():
    return feature


@pytest.fixture
def response_factory():
    return make_response
