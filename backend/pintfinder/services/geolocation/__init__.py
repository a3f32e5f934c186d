"""User position lookup."""

from .service import LOCATION_FAILURES, FixedGeoLocator, GeoLocator, location_error

__all__ = [
    "LOCATION_FAILURES",
    "FixedGeoLocator",
    "GeoLocator",
    "location_error",
]
