"""Origin coordinates for discovery.

The device does the actual positioning; the backend only needs something it
can ask for "where is the user". ``FixedGeoLocator`` wraps a position the
client already reported, or the failure the client ran into.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import ValidationError

from pintfinder.models import (
    Coordinates,
    LocationError,
    LocationPermissionDeniedError,
    LocationTimeoutError,
    LocationUnavailableError,
    LocationUnsupportedError,
)

# Failure names a client may report instead of a position
LOCATION_FAILURES: dict[str, type[LocationError]] = {
    "permission_denied": LocationPermissionDeniedError,
    "unavailable": LocationUnavailableError,
    "timeout": LocationTimeoutError,
    "unsupported": LocationUnsupportedError,
}


def location_error(failure: str) -> LocationError:
    """Build the LocationError for a client-reported failure name."""
    error_cls = LOCATION_FAILURES.get(failure, LocationUnavailableError)
    return error_cls(f"Client geolocation failed: {failure}")


class GeoLocator(ABC):
    """Supplies the user's current position."""

    @abstractmethod
    async def get_current_position(self) -> Coordinates:
        """Raises a LocationError subclass when no position is available."""
        pass


class FixedGeoLocator(GeoLocator):
    """A position (or failure) already reported by the client."""

    def __init__(
        self,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        failure: Optional[str] = None,
    ) -> None:
        self._lat = lat
        self._lon = lon
        self._failure = failure

    async def get_current_position(self) -> Coordinates:
        if self._failure:
            raise location_error(self._failure)
        if self._lat is None or self._lon is None:
            raise LocationUnavailableError("No position supplied")
        try:
            return Coordinates(lat=self._lat, lon=self._lon)
        except ValidationError as e:
            raise LocationUnavailableError(f"Invalid position ({self._lat}, {self._lon})") from e
