import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import settings
from app.core.cors import configure_cors
from app.core.logger import logs
from app.core.middleware import BodySizeLimitMiddleware, RateLimitMiddleware, SecurityHeadersMiddleware
from app.routes.places_route import router as places_router, places_cache

@asynccontextmanager
async def lifespan(app: FastAPI):
    places_cache.start_sweeper()
    logs.log(logging.INFO, f"TripScout API started (env={settings.ENV})")
    yield
    await places_cache.stop_sweeper()


def create_app() -> FastAPI:
    app = FastAPI(title="TripScout API", lifespan=lifespan)

    # Added last runs first: CORS wraps everything so even 429s carry CORS headers.
    app.add_middleware(
        RateLimitMiddleware,
        window_ms=settings.RATE_LIMIT_WINDOW_MS,
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        prefix="/api"
    )
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.MAX_BODY_BYTES)
    app.add_middleware(SecurityHeadersMiddleware)
    configure_cors(app, settings)

    app.include_router(places_router)

    # --- Root Endpoint ---
    @app.get("/")
    async def root():
        return {
            "message": "Welcome to TripScout API",
            "status": "running",
            "endpoints": {
                "health": "/health",
                "hotels": "/api/hotels",
                "restaurants": "/api/restaurants",
                "activities": "/api/activities",
                "malls": "/api/malls",
                "docs": "/docs"
            },
            "version": "1.0.0"
        }

    # --- Health Check ---
    @app.get("/health")
    async def health_check():
        return {"status": "ok", "service": "TripScout API", "cached_queries": len(places_cache)}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.PORT, reload=not settings.is_production)
