"""Pint Finder data models."""

from .core import (
    Confidence,
    Coordinates,
    CrawlItinerary,
    CrawlStats,
    DistanceQuality,
    RankedVenueList,
    Venue,
)
from .errors import (
    AppError,
    DiscoveryError,
    ErrorCode,
    LocationError,
    LocationPermissionDeniedError,
    LocationTimeoutError,
    LocationUnavailableError,
    LocationUnsupportedError,
    NoResultsError,
    NoVenuesFoundError,
    PintFinderError,
    RefinementError,
    SessionNotFoundError,
)

__all__ = [
    # Core
    "Confidence",
    "Coordinates",
    "CrawlItinerary",
    "CrawlStats",
    "DistanceQuality",
    "RankedVenueList",
    "Venue",
    # Errors
    "AppError",
    "DiscoveryError",
    "ErrorCode",
    "LocationError",
    "LocationPermissionDeniedError",
    "LocationTimeoutError",
    "LocationUnavailableError",
    "LocationUnsupportedError",
    "NoResultsError",
    "NoVenuesFoundError",
    "PintFinderError",
    "RefinementError",
    "SessionNotFoundError",
]
