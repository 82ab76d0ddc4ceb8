import httpx
import logging
import math
import re
from typing import Optional, Union

from app.core.config import settings
from app.core.errors import InvalidInputError, NotFoundError
from app.core.logger import logs
from app.models.places_model import Coordinates

CoordinateValue = Union[str, float, int, None]

# Plain decimal notation only: no exponents, underscores or hex
DECIMAL_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)$")


def validate_coordinates(lat: CoordinateValue, lng: CoordinateValue) -> Coordinates:
    """Parse lat/lng (decimal strings or numbers) and check their ranges."""
    for value in (lat, lng):
        if isinstance(value, str) and not DECIMAL_PATTERN.match(value.strip()):
            raise InvalidInputError("Invalid coordinates format")

    try:
        lat_num = float(lat)
        lng_num = float(lng)
    except (TypeError, ValueError):
        raise InvalidInputError("Invalid coordinates format")

    if not (math.isfinite(lat_num) and math.isfinite(lng_num)):
        raise InvalidInputError("Invalid coordinates format")

    if lat_num < -90 or lat_num > 90 or lng_num < -180 or lng_num > 180:
        raise InvalidInputError("Coordinates out of range")

    return Coordinates(lat=lat_num, lng=lng_num)


def _present(value: CoordinateValue) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


class GeocodingService:
    """Turns a place name, or a raw lat/lng pair, into coordinates."""

    def __init__(self, api_key: str = None, base_url: str = None, timeout: float = None):
        self.api_key = api_key or settings.GEOAPIFY_API_KEY
        self.base_url = base_url or settings.GEOAPIFY_GEOCODE_URL
        self.timeout = timeout if timeout is not None else settings.GEOCODE_TIMEOUT

    async def geocode_city(self, city: str) -> Coordinates:
        async with httpx.AsyncClient() as client:
            resp = await client.get(
                self.base_url,
                params={"text": city, "apiKey": self.api_key, "limit": 1},
                timeout=self.timeout
            )
            resp.raise_for_status()
            data = resp.json()

        features = data.get("features") or []
        props = features[0].get("properties", {}) if features else {}
        lat, lon = props.get("lat"), props.get("lon")
        if lat is None or lon is None:
            raise NotFoundError(f"No coordinates found for city: {city}")

        logs.log(logging.INFO, f"Geocoded {city} to: lat={lat}, lon={lon}")
        return Coordinates(lat=lat, lng=lon)

    async def resolve(
        self,
        lat: CoordinateValue = None,
        lng: CoordinateValue = None,
        location: Optional[str] = None,
    ) -> Coordinates:
        """
        Exactly one path runs: a complete lat/lng pair is validated locally,
        otherwise the location name is geocoded.
        """
        if _present(lat) and _present(lng):
            return validate_coordinates(lat, lng)
        if not location or not location.strip():
            raise InvalidInputError("Location or coordinates required")
        return await self.geocode_city(location.strip())
