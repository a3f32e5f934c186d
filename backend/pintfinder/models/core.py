"""Core data models for Pint Finder.

This module contains the Pydantic models used throughout the application for
representing coordinates, venues, ranked result lists and crawl itineraries.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

from pydantic import BaseModel, Field


class DistanceQuality(str, Enum):
    """How a venue's distance/time was obtained."""

    ESTIMATE = "estimate"  # straight-line (haversine)
    ROUTED = "routed"  # walking route from the routing service


class Confidence(str, Enum):
    """How sure we are that a venue is actually somewhere to get a drink.

    HIGH:   tagged as a pub, bar, biergarten or social club.
    MEDIUM: tagged as a restaurant, included because of its name.
    """

    HIGH = "high"
    MEDIUM = "medium"


class Coordinates(BaseModel):
    """Geographic coordinates with validation.

    Latitude must be between -90 and 90 degrees.
    Longitude must be between -180 and 180 degrees.
    """

    lat: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    lon: float = Field(..., ge=-180, le=180, description="Longitude in degrees")

    @property
    def key(self) -> tuple[float, float]:
        return (self.lat, self.lon)


class Venue(BaseModel):
    """A drinking establishment found near the user.

    Venues have no reliable external id, so identity is the coordinate pair
    (see ``key``).
    """

    name: str = Field(..., min_length=1, description="Display name")
    coordinates: Coordinates = Field(..., description="Geographic location")
    category: Optional[str] = Field(None, description="OSM amenity value, e.g. 'pub'")
    distance_km: float = Field(..., ge=0, description="Walking distance from the origin in km")
    walking_time_min: float = Field(..., ge=0, description="Walking time from the origin in minutes")
    quality: DistanceQuality = Field(
        default=DistanceQuality.ESTIMATE, description="Straight-line estimate or routed"
    )
    confidence: Confidence = Field(..., description="Classification confidence")
    needs_refinement: bool = Field(
        default=True, description="Still eligible for a routed-distance upgrade"
    )

    @property
    def key(self) -> tuple[float, float]:
        return self.coordinates.key


@dataclass
class RankedVenueList:
    """Venues from one discovery cycle, nearest first.

    The list is ascending by ``distance_km`` as of the last ``sort()``.
    ``generation`` identifies the discovery cycle; background refinement
    compares it against the active list before applying results.
    """

    generation: int
    origin: Coordinates
    venues: list[Venue] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.venues)

    def __getitem__(self, index: int) -> Venue:
        return self.venues[index]

    def __iter__(self) -> Iterator[Venue]:
        return iter(self.venues)

    @property
    def is_fresh(self) -> bool:
        """True until any venue has been claimed for refinement."""
        return bool(self.venues) and all(v.needs_refinement for v in self.venues)

    def sort(self) -> None:
        self.venues.sort(key=lambda v: v.distance_km)


class CrawlStats(BaseModel):
    """Aggregate distance/time of a crawl itinerary."""

    stops: int = Field(default=0, ge=0)
    distance_km: float = Field(default=0.0, ge=0)
    walking_time_min: float = Field(default=0.0, ge=0)


class CrawlItinerary(BaseModel):
    """An ordered list of waypoints, starting from an optional coordinate."""

    start: Optional[Coordinates] = Field(None, description="Where the crawl begins")
    waypoints: list[Venue] = Field(
        default_factory=list, description="Venues in visiting order, unique by coordinate"
    )
