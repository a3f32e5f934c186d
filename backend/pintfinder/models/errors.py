"""Error models and exceptions.

Every failure the core reports derives from ``PintFinderError`` and carries an
``ErrorCode`` plus a short message suitable for showing to the user.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Error codes returned by the API."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    API_ERROR = "API_ERROR"
    DISCOVERY_FAILED = "DISCOVERY_FAILED"
    NO_VENUES_FOUND = "NO_VENUES_FOUND"
    ROUTING_FAILED = "ROUTING_FAILED"
    LOCATION_PERMISSION_DENIED = "LOCATION_PERMISSION_DENIED"
    LOCATION_UNAVAILABLE = "LOCATION_UNAVAILABLE"
    LOCATION_TIMEOUT = "LOCATION_TIMEOUT"
    LOCATION_UNSUPPORTED = "LOCATION_UNSUPPORTED"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    NO_RESULTS = "NO_RESULTS"


class AppError(BaseModel):
    """Error payload included in failed API responses."""

    code: ErrorCode
    message: str
    user_message: str
    retryable: bool = Field(default=True, description="Whether a manual retry may help")


class PintFinderError(Exception):
    """Base class for errors raised by the core."""

    code: ErrorCode = ErrorCode.API_ERROR
    user_message: str = "Something went wrong. Please try again."
    retryable: bool = True

    def __init__(self, message: str, user_message: Optional[str] = None) -> None:
        super().__init__(message)
        if user_message is not None:
            self.user_message = user_message

    def to_app_error(self) -> AppError:
        return AppError(
            code=self.code,
            message=str(self),
            user_message=self.user_message,
            retryable=self.retryable,
        )


class DiscoveryError(PintFinderError):
    """The POI source was unreachable or answered with a non-success status."""

    code = ErrorCode.DISCOVERY_FAILED
    user_message = "Failed to fetch nearby pubs. Please try again."


class NoVenuesFoundError(PintFinderError):
    """Discovery succeeded but nothing survived classification."""

    code = ErrorCode.NO_VENUES_FOUND
    user_message = "No pubs found nearby. Try a different location!"


class RefinementError(PintFinderError):
    """The routing service could not produce a walking route for one venue.

    Never reaches the user; the venue keeps its straight-line estimate.
    """

    code = ErrorCode.ROUTING_FAILED
    user_message = "Walking route unavailable."


class LocationError(PintFinderError):
    """Base class for geolocation failures."""

    code = ErrorCode.LOCATION_UNAVAILABLE
    user_message = "Could not get location. Please check your settings and try again."


class LocationPermissionDeniedError(LocationError):
    code = ErrorCode.LOCATION_PERMISSION_DENIED
    user_message = "Location access denied. Please enable location in your browser settings and refresh."


class LocationUnavailableError(LocationError):
    code = ErrorCode.LOCATION_UNAVAILABLE
    user_message = "Location unavailable. Please check that Location Services is enabled on your device."


class LocationTimeoutError(LocationError):
    code = ErrorCode.LOCATION_TIMEOUT
    user_message = "Location request timed out. Please try again."


class LocationUnsupportedError(LocationError):
    code = ErrorCode.LOCATION_UNSUPPORTED
    user_message = "Geolocation is not supported by your browser."
    retryable = False


class SessionNotFoundError(PintFinderError):
    code = ErrorCode.SESSION_NOT_FOUND
    user_message = "Your session has expired. Please search again."
    retryable = False


class NoResultsError(PintFinderError):
    """A browsing or crawl command was issued before any discovery."""

    code = ErrorCode.NO_RESULTS
    user_message = "Find a pub first."
