"""
Location detection for the TripScout frontend.

Detection walks an ordered list of strategies (browser coordinates plus a
reverse geocode, then an IP lookup). Each strategy has its own timeout; the
first one that succeeds wins, failures are logged and the next one is tried.
When every strategy fails the caller gets None and asks the user to type a
location instead.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

import requests

logger = logging.getLogger(__name__)

NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"
NOMINATIM_REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"
IP_LOOKUP_URL = "https://ipapi.co/json/"
HEADERS = {"User-Agent": "TripScout/1.0"}
DEFAULT_TIMEOUT = 5


@dataclass
class DetectedLocation:
    name: str
    lat: float
    lng: float
    source: str  # "gps", "ip" or "manual"


Strategy = tuple[str, Callable[[], Optional[DetectedLocation]]]


def reverse_geocode(lat: float, lng: float, timeout: float = DEFAULT_TIMEOUT) -> str:
    """City name for a coordinate pair. Raises on network or HTTP errors."""
    resp = requests.get(
        NOMINATIM_REVERSE_URL,
        params={"lat": lat, "lon": lng, "format": "json", "zoom": 12},
        headers=HEADERS,
        timeout=timeout
    )
    resp.raise_for_status()
    address = resp.json().get("address") or {}
    return (
        address.get("city")
        or address.get("town")
        or address.get("village")
        or address.get("state")
        or "Unknown Location"
    )


def geocode_city(name: str, timeout: float = DEFAULT_TIMEOUT) -> Optional[DetectedLocation]:
    """Forward geocode a typed location. Returns None when nothing matches or the lookup fails."""
    try:
        resp = requests.get(
            NOMINATIM_SEARCH_URL,
            params={"q": name, "format": "json", "limit": 1},
            headers=HEADERS,
            timeout=timeout
        )
        resp.raise_for_status()
        data = resp.json()
        if not data:
            logger.info("No coordinates found for city: %s", name)
            return None
        return DetectedLocation(
            name=name,
            lat=float(data[0]["lat"]),
            lng=float(data[0]["lon"]),
            source="manual"
        )
    except Exception as e:
        logger.warning("Geocode failed for %s: %s", name, e)
        return None


def lookup_ip_location(timeout: float = DEFAULT_TIMEOUT) -> DetectedLocation:
    """Approximate location from the caller's public IP. Raises when unavailable."""
    resp = requests.get(IP_LOOKUP_URL, headers=HEADERS, timeout=timeout)
    resp.raise_for_status()
    data = resp.json()
    if data.get("error") or data.get("latitude") is None or data.get("longitude") is None:
        raise LookupError(data.get("reason") or "IP lookup returned no coordinates")
    return DetectedLocation(
        name=data.get("city") or data.get("region") or "Unknown Location",
        lat=float(data["latitude"]),
        lng=float(data["longitude"]),
        source="ip"
    )


def default_strategies(
    browser_coords: Optional[tuple[float, float]] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> list[Strategy]:
    strategies = []
    if browser_coords is not None:
        lat, lng = browser_coords

        def from_browser():
            return DetectedLocation(
                name=reverse_geocode(lat, lng, timeout=timeout),
                lat=lat,
                lng=lng,
                source="gps"
            )

        strategies.append(("gps", from_browser))
    strategies.append(("ip", lambda: lookup_ip_location(timeout=timeout)))
    return strategies


def detect_location(
    browser_coords: Optional[tuple[float, float]] = None,
    strategies: Optional[Iterable[Strategy]] = None,
) -> Optional[DetectedLocation]:
    if strategies is None:
        strategies = default_strategies(browser_coords)

    for name, strategy in strategies:
        try:
            result = strategy()
        except Exception as e:
            logger.warning("Location strategy '%s' failed: %s", name, e)
            continue
        if result is not None:
            logger.info("Location detected via %s: %s", name, result.name)
            return result

    logger.info("All location strategies failed, falling back to manual entry")
    return None
