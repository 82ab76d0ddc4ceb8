"""Client for the TripScout backend used by the Streamlit results view."""
import logging
import uuid
from typing import Optional

import requests

logger = logging.getLogger(__name__)

TAB_CATEGORIES = {
    "hotels": ["all", "hotel", "restaurant"],
    "activities": ["all", "mall", "activity"],
}

TAB_TITLES = {
    "hotels": "Hotels & Restaurants",
    "activities": "Fun Activities",
}


def endpoints_for(tab: str, category: str) -> list[str]:
    """Backend paths to query for a tab and the selected category chip."""
    if tab == "hotels":
        if category == "all":
            return ["/api/hotels", "/api/restaurants"]
        return [f"/api/{category}s"]
    if category == "all":
        return ["/api/activities", "/api/malls"]
    return ["/api/activities" if category == "activity" else "/api/malls"]


def build_params(coords: Optional[dict] = None, location: Optional[str] = None) -> Optional[dict]:
    """Prefer coordinates, fall back to the location name. None when neither is known."""
    if coords and coords.get("lat") is not None and coords.get("lng") is not None:
        return {"lat": coords["lat"], "lng": coords["lng"]}
    if location:
        return {"location": location}
    return None


def normalize_item(item: dict) -> dict:
    return {
        "id": item.get("id") or uuid.uuid4().hex,
        "name": item.get("name") or "Unnamed Location",
        "location": item.get("location") or "Address not available",
        "type": item.get("type") or "unknown",
    }


def fetch_places(
    backend_url: str,
    tab: str,
    category: str,
    coords: Optional[dict] = None,
    location: Optional[str] = None,
    timeout: float = 15,
) -> list[dict]:
    """
    Query every endpoint for the view and merge the results. An endpoint that
    answers 404 simply contributes nothing; any other failure empties the view.
    """
    params = build_params(coords, location)
    if params is None:
        logger.error("No coordinates or location provided")
        return []

    items = []
    for endpoint in endpoints_for(tab, category):
        try:
            response = requests.get(
                f"{backend_url}{endpoint}",
                params=params,
                headers={"Accept": "application/json"},
                timeout=timeout
            )
            if response.status_code == 404:
                continue
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error("Loading places from %s failed: %s", endpoint, e)
            return []
        except ValueError as e:
            logger.error("Invalid JSON from %s: %s", endpoint, e)
            return []

        if isinstance(data, list):
            items.extend(normalize_item(item) for item in data)

    return items


def check_backend_health(backend_url: str) -> bool:
    """Check if backend is running."""
    try:
        response = requests.get(f"{backend_url}/health", timeout=2)
        return response.status_code == 200
    except requests.exceptions.RequestException:
        return False
