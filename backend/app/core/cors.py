"""
CORS setup. Call `configure_cors(app, settings)` once while building the app.

Only GET and OPTIONS are allowed, with credentials. In production the origin
must be on the allow-list or match ALLOWED_ORIGIN_REGEX; anywhere else every
origin is accepted so local frontends on arbitrary ports just work.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.logger import logs

CORS_METHODS = ["GET", "OPTIONS"]
CORS_HEADERS = ["Content-Type", "Authorization"]
CORS_MAX_AGE = 86400

# Matches any origin; used outside production in place of "*" so that
# credentials stay allowed and the caller's origin is echoed back.
ANY_ORIGIN_REGEX = r".*"


def build_cors_options(settings) -> dict:
    origin_regex = settings.ALLOWED_ORIGIN_REGEX if settings.is_production else ANY_ORIGIN_REGEX

    return {
        "allow_origins": settings.allowed_origins,
        "allow_origin_regex": origin_regex,
        "allow_credentials": True,
        "allow_methods": CORS_METHODS,
        "allow_headers": CORS_HEADERS,
        "max_age": CORS_MAX_AGE,
    }


def configure_cors(app: FastAPI, settings):
    options = build_cors_options(settings)
    logs.log(logging.INFO, f"CORS allowed origins: {options['allow_origins']} (regex: {options['allow_origin_regex']})")
    app.add_middleware(CORSMiddleware, **options)
