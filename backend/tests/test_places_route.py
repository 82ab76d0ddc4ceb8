"""
Tests for the /api category endpoints: status codes, bodies, error hiding.
"""
import logging
import pytest
from unittest.mock import AsyncMock, Mock, patch

import httpx

from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.errors import InvalidInputError, NotFoundError, UpstreamTimeoutError
from app.main import create_app
from app.models.places_model import Place
from app.repos.places_cache import PlacesCache
from app.routes.places_route import get_places_service
from app.services.Geocoding_service import GeocodingService
from app.services.Places_service import PlacesService

ENDPOINTS = {
    "/api/hotels": "fetch_hotels",
    "/api/restaurants": "fetch_restaurants",
    "/api/activities": "fetch_activities",
    "/api/malls": "fetch_malls",
}

SAMPLE = [Place(id="p1", name="Le Meurice", location="228 Rue de Rivoli, Paris", type="hotel")]


@pytest.fixture
def fake_service():
    service = Mock()
    for method in ENDPOINTS.values():
        setattr(service, method, AsyncMock(return_value=SAMPLE))
        getattr(service, method).__name__ = method
    return service


@pytest.fixture
def client(fake_service):
    app = create_app()
    app.dependency_overrides[get_places_service] = lambda: fake_service
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


class TestValidation:
    @pytest.mark.parametrize("query", ["", "?lat=48.85", "?lng=2.35", "?lat=&lng=&location=", "?location=%20%20"])
    def test_missing_parameters_is_400(self, client, fake_service, query):
        response = client.get(f"/api/hotels{query}")

        assert response.status_code == 400
        assert response.json() == {
            "error": "Missing required parameters: either location or lat/lng coordinates"
        }
        fake_service.fetch_hotels.assert_not_awaited()

    def test_invalid_coordinates_is_400_with_reason(self, client, fake_service):
        fake_service.fetch_hotels.side_effect = InvalidInputError("Coordinates out of range")

        response = client.get("/api/hotels?lat=91&lng=0")

        assert response.status_code == 400
        assert response.json() == {"error": "Coordinates out of range"}


class TestResponses:
    @pytest.mark.parametrize("path, method", list(ENDPOINTS.items()))
    def test_each_endpoint_uses_its_category_fetcher(self, client, fake_service, path, method):
        response = client.get(f"{path}?location=Paris")

        assert response.status_code == 200
        assert response.json() == [
            {"id": "p1", "name": "Le Meurice", "location": "228 Rue de Rivoli, Paris", "type": "hotel"}
        ]
        getattr(fake_service, method).assert_awaited_once_with(lat=None, lng=None, location="Paris")

    def test_coordinates_are_forwarded_as_strings(self, client, fake_service):
        client.get("/api/malls?lat=48.8566&lng=2.3522")

        fake_service.fetch_malls.assert_awaited_once_with(lat="48.8566", lng="2.3522", location=None)

    def test_empty_result_is_404(self, client, fake_service):
        fake_service.fetch_restaurants.return_value = []

        response = client.get("/api/restaurants?location=Nowhere")

        assert response.status_code == 404
        assert response.json() == {"message": "No results found"}

    def test_timeout_is_generic_500(self, client, fake_service):
        fake_service.fetch_activities.side_effect = UpstreamTimeoutError()

        response = client.get("/api/activities?location=Paris")

        assert response.status_code == 500
        assert response.json() == {"error": "An internal server error occurred"}

    @pytest.mark.parametrize("error", [
        NotFoundError("No coordinates found for city: Atlantis"),
        RuntimeError("secret upstream detail"),
        KeyError("features"),
    ])
    def test_other_failures_do_not_leak_detail(self, client, fake_service, error):
        fake_service.fetch_hotels.side_effect = error

        response = client.get("/api/hotels?location=Atlantis")

        assert response.status_code == 500
        assert response.json() == {"error": "An internal server error occurred"}
        assert "secret" not in response.text
        assert "Atlantis" not in response.text


class TestEndToEnd:
    def test_location_request_geocodes_fetches_and_caches(self, http_client, response_factory):
        service = PlacesService(PlacesCache(), GeocodingService(api_key="k"))
        app = create_app()
        app.dependency_overrides[get_places_service] = lambda: service

        geocode_response = response_factory({"features": [{"properties": {"lat": 48.8566, "lon": 2.3522}}]})
        places_response = response_factory({"features": [
            {"properties": {"place_id": "x", "name": "Hôtel Ritz", "formatted": "15 Place Vendôme, Paris",
                            "categories": ["accommodation.hotel"]}},
            {"properties": {"place_id": "x", "categories": ["accommodation.hotel"]}},
        ]})

        async def route_get(url, *args, **kwargs):
            if url == settings.GEOAPIFY_GEOCODE_URL:
                return geocode_response
            return places_response

        mock_client = http_client(side_effect=route_get)

        with patch("httpx.AsyncClient", return_value=mock_client):
            with TestClient(app) as test_client:
                first = test_client.get("/api/hotels?location=Paris")
                second = test_client.get("/api/hotels?location=Paris")

        assert first.status_code == 200
        assert first.json() == [
            {"id": "x", "name": "Hôtel Ritz", "location": "15 Place Vendôme, Paris", "type": "hotel"},
            {"id": "x-1", "name": "Unnamed Location", "location": "Address not available", "type": "hotel"},
        ]
        assert second.json() == first.json()
        # two geocodes, one places fetch
        assert mock_client.get.await_count == 3
        assert service.cache.get("places_48.8566_2.3522_accommodation.hotel") is not None

    def test_each_failure_is_logged_once_at_error(self, http_client, caplog):
        service = PlacesService(PlacesCache(), GeocodingService(api_key="k"))
        app = create_app()
        app.dependency_overrides[get_places_service] = lambda: service
        mock_client = http_client(side_effect=httpx.ReadTimeout("slow upstream"))
        caplog.set_level(logging.INFO, logger="APP-BE")

        with patch("httpx.AsyncClient", return_value=mock_client):
            with TestClient(app) as test_client:
                timed_out = test_client.get("/api/hotels?lat=1&lng=2")
                rejected = test_client.get("/api/hotels?lat=91&lng=2")

        assert timed_out.status_code == 500
        assert rejected.status_code == 400
        errors = [r for r in caplog.records if r.name == "APP-BE" and r.levelno >= logging.ERROR]
        assert len(errors) == 1
        assert "Request timed out" in errors[0].getMessage()
        warnings = [r for r in caplog.records if r.name == "APP-BE" and r.levelno == logging.WARNING]
        assert any("Coordinates out of range" in r.getMessage() for r in warnings)


class TestServiceEndpoints:
    def test_root_and_health(self, client):
        assert client.get("/").json()["status"] == "running"

        health = client.get("/health")
        assert health.status_code == 200
        assert health.json()["status"] == "ok"
        assert "cached_queries" in health.json()
