import asyncio
import httpx
import logging
import time
from typing import Optional

from app.core.config import settings
from app.core.errors import UpstreamTimeoutError
from app.core.logger import logs
from app.models.places_model import Coordinates, Place
from app.repos.places_cache import PlacesCache, make_cache_key, format_coordinate
from app.services.Geocoding_service import GeocodingService, CoordinateValue

# Endpoint name -> Geoapify category filter
CATEGORY_FILTERS = {
    "hotels": "accommodation.hotel",
    "restaurants": "catering.restaurant",
    "activities": "leisure",
    "malls": "commercial.shopping_mall",
}


def map_features(features: list[dict]) -> list[Place]:
    """Reshape Geoapify features into Places with ids unique to this response."""
    seen_ids = set()
    places = []
    now_ms = int(time.time() * 1000)

    for index, item in enumerate(features):
        props = item.get("properties") or {}

        place_id = props.get("place_id") or f"geoapify-{now_ms}-{index}"
        place_id = str(place_id)
        if place_id in seen_ids:
            place_id = f"{place_id}-{index}"
        seen_ids.add(place_id)

        categories = props.get("categories") or []
        place_type = categories[0].split(".")[-1] if categories and categories[0] else ""

        places.append(Place(
            id=place_id,
            name=props.get("name") or "Unnamed Location",
            location=props.get("formatted") or props.get("address_line1") or "Address not available",
            type=place_type or "general"
        ))

    return places


class PlacesService:
    def __init__(self, cache: PlacesCache, geocoder: GeocodingService = None):
        self.cache = cache
        self.geocoder = geocoder or GeocodingService()
        self.places_url = settings.GEOAPIFY_PLACES_URL
        self.api_key = settings.GEOAPIFY_API_KEY
        self.radius = settings.PLACES_RADIUS_METERS
        self.limit = settings.PLACES_LIMIT
        self.timeout = settings.PLACES_TIMEOUT
        # cache key -> upstream call currently in flight for it
        self._inflight: dict[str, asyncio.Task] = {}

    async def fetch_places(
        self,
        lat: CoordinateValue = None,
        lng: CoordinateValue = None,
        location: Optional[str] = None,
        *,
        categories: str,
    ) -> list[Place]:
        try:
            # 1. Resolve coordinates
            coords = await self.geocoder.resolve(lat=lat, lng=lng, location=location)

            # 2. Check Cache
            cache_key = make_cache_key(coords.lat, coords.lng, categories)
            cached = self.cache.get(cache_key)
            if cached is not None:
                logs.log(logging.INFO, f"✓ Places cache HIT for {cache_key}")
                return cached

            # 3. Fetch, sharing any call already in flight for this key
            logs.log(logging.INFO, f"✗ Places cache MISS for {cache_key}")
            task = self._inflight.get(cache_key)
            if task is None:
                task = asyncio.ensure_future(self._fetch_and_store(cache_key, coords, categories))
                self._inflight[cache_key] = task
                task.add_done_callback(lambda t: self._forget(cache_key, t))
            else:
                logs.log(logging.INFO, f"Joining in-flight request for {cache_key}")
            return await asyncio.shield(task)

        except httpx.TimeoutException as e:
            # Callers log the failure; only the timeout is translated here.
            raise UpstreamTimeoutError() from e

    def _forget(self, cache_key: str, task: asyncio.Task):
        self._inflight.pop(cache_key, None)
        # Mark the outcome as retrieved; every waiter re-raises it on its own.
        if not task.cancelled():
            task.exception()

    async def _fetch_and_store(self, cache_key: str, coords: Coordinates, categories: str) -> list[Place]:
        logs.log(logging.INFO, f"Fetching places for lat={coords.lat}, lng={coords.lng}, categories={categories}")

        params = {
            "apiKey": self.api_key,
            "limit": self.limit,
            "filter": f"circle:{format_coordinate(coords.lng)},{format_coordinate(coords.lat)},{self.radius}",
            "categories": categories,
        }
        async with httpx.AsyncClient() as client:
            response = await client.get(self.places_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()

        places = map_features(data["features"])
        logs.log(logging.INFO, f"Geoapify returned {len(places)} places for categories={categories}")

        # 4. Save to Cache
        self.cache.set(cache_key, places)
        return places

    # ===== Category entry points =====

    async def fetch_hotels(self, **params) -> list[Place]:
        return await self.fetch_places(**params, categories=CATEGORY_FILTERS["hotels"])

    async def fetch_restaurants(self, **params) -> list[Place]:
        return await self.fetch_places(**params, categories=CATEGORY_FILTERS["restaurants"])

    async def fetch_activities(self, **params) -> list[Place]:
        return await self.fetch_places(**params, categories=CATEGORY_FILTERS["activities"])

    async def fetch_malls(self, **params) -> list[Place]:
        return await self.fetch_places(**params, categories=CATEGORY_FILTERS["malls"])
