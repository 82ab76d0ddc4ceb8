"""
Error taxonomy for the places proxy.

The routes translate these into HTTP responses: InvalidInputError is a 400,
everything else becomes a generic 500 with the detail kept in the logs.
"""


class PlacesError(Exception):
    """Base class for errors raised by the places pipeline."""


class InvalidInputError(PlacesError):
    """Malformed or out-of-range coordinates, or no location at all."""


class NotFoundError(PlacesError):
    """The geocoder returned no match for a place name."""


class UpstreamTimeoutError(PlacesError):
    """An upstream call exceeded its deadline."""

    def __init__(self, message: str = "Request timed out. Please try again."):
        super().__init__(message)
