from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # "development" or "production"
    ENV: str = "development"
    PORT: int = 5000

    LOGGER: int = 20
    LOG_DIRECTORY: str = "logs"

    # Geoapify
    GEOAPIFY_API_KEY: str = "your-key-here"
    GEOAPIFY_PLACES_URL: str = "https://api.geoapify.com/v2/places"
    GEOAPIFY_GEOCODE_URL: str = "https://api.geoapify.com/v1/geocode/search"
    PLACES_RADIUS_METERS: int = 10000
    PLACES_LIMIT: int = 50
    PLACES_TIMEOUT: float = 5.0
    GEOCODE_TIMEOUT: float = 5.0

    # In-memory places cache
    CACHE_TTL_SECONDS: int = 900
    CACHE_CHECK_PERIOD_SECONDS: int = 120

    # Rate limiting for /api (fixed window)
    RATE_LIMIT_WINDOW_MS: int = 15 * 60 * 1000
    RATE_LIMIT_MAX_REQUESTS: int = 100

    # CORS: comma separated origins, plus an optional regex
    ALLOWED_ORIGINS: str = (
        "http://localhost:5173,"
        "http://localhost:4173,"
        "https://tripscout.vercel.app,"
        "https://tripscout.netlify.app"
    )
    ALLOWED_ORIGIN_REGEX: str | None = None

    MAX_BODY_BYTES: int = 10 * 1024

    model_config = SettingsConfigDict(
        # Look for .env in the current folder OR the parent folder
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    @property
    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

settings = Settings()
