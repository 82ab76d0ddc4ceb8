import logging
from typing import Awaitable, Callable, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.errors import InvalidInputError
from app.core.logger import logs
from app.models.places_model import ErrorResponse, NotFoundResponse, Place
from app.repos.places_cache import PlacesCache
from app.services.Places_service import PlacesService

router = APIRouter(prefix="/api")

MISSING_PARAMS_MESSAGE = "Missing required parameters: either location or lat/lng coordinates"
NO_RESULTS_MESSAGE = "No results found"
INTERNAL_ERROR_MESSAGE = "An internal server error occurred"

RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": NotFoundResponse},
    500: {"model": ErrorResponse},
}

# One cache and one service per process; the sweeper is started by the app lifespan.
places_cache = PlacesCache(
    ttl_seconds=settings.CACHE_TTL_SECONDS,
    check_period_seconds=settings.CACHE_CHECK_PERIOD_SECONDS
)
places_service = PlacesService(places_cache)

# --- Dependency Injection ---
def get_places_service() -> PlacesService:
    return places_service


async def handle_request(
    fetcher: Callable[..., Awaitable[list[Place]]],
    lat: Optional[str],
    lng: Optional[str],
    location: Optional[str],
):
    """Validate the query, run one category fetch and shape the HTTP answer."""
    location = location.strip() if location else None
    if not location and (not lat or not lng):
        return JSONResponse(status_code=400, content={"error": MISSING_PARAMS_MESSAGE})

    try:
        data = await fetcher(lat=lat, lng=lng, location=location)
    except InvalidInputError as e:
        logs.log(logging.WARNING, f"Rejected request in {fetcher.__name__}: {str(e)}")
        return JSONResponse(status_code=400, content={"error": str(e)})
    except Exception as e:
        logs.exception(f"Error in {fetcher.__name__}", extra={"error": str(e)})
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})

    if not data:
        return JSONResponse(status_code=404, content={"message": NO_RESULTS_MESSAGE})

    return data


@router.get("/hotels", response_model=list[Place], responses=RESPONSES)
async def get_hotels(
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    location: Optional[str] = None,
    service: PlacesService = Depends(get_places_service)
):
    return await handle_request(service.fetch_hotels, lat, lng, location)


@router.get("/restaurants", response_model=list[Place], responses=RESPONSES)
async def get_restaurants(
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    location: Optional[str] = None,
    service: PlacesService = Depends(get_places_service)
):
    return await handle_request(service.fetch_restaurants, lat, lng, location)


@router.get("/activities", response_model=list[Place], responses=RESPONSES)
async def get_activities(
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    location: Optional[str] = None,
    service: PlacesService = Depends(get_places_service)
):
    return await handle_request(service.fetch_activities, lat, lng, location)


@router.get("/malls", response_model=list[Place], responses=RESPONSES)
async def get_malls(
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    location: Optional[str] = None,
    service: PlacesService = Depends(get_places_service)
):
    return await handle_request(service.fetch_malls, lat, lng, location)
