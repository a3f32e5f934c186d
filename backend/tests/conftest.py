"""Shared fixtures: venue factories and in-memory fakes for the external services."""

import asyncio
import math
from typing import Optional

import pytest

from pintfinder.models import (
    Confidence,
    Coordinates,
    RankedVenueList,
    RefinementError,
    Venue,
)
from pintfinder.services.osm import OSMPlace, VenueSource
from pintfinder.services.routing import RouteResult, RoutingService
from pintfinder.utils.geo import walking_minutes

# Along a meridian, haversine distance is exactly R * delta_lat
KM_PER_DEGREE = 6371 * math.pi / 180

ORIGIN = Coordinates(lat=0.0, lon=0.0)


def north_of_origin(km: float) -> Coordinates:
    return Coordinates(lat=km / KM_PER_DEGREE, lon=0.0)


def east_of_origin(km: float) -> Coordinates:
    return Coordinates(lat=0.0, lon=km / KM_PER_DEGREE)


class FakeVenueSource(VenueSource):
    """Returns canned places, or raises a canned error."""

    def __init__(self, places: Optional[list[OSMPlace]] = None, error: Optional[Exception] = None) -> None:
        self.places = places or []
        self.error = error
        self.calls: list[tuple[Coordinates, int, list[str]]] = []

    async def query(self, origin: Coordinates, radius_m: int, categories: list[str]) -> list[OSMPlace]:
        self.calls.append((origin, radius_m, categories))
        if self.error is not None:
            raise self.error
        return list(self.places)


class FakeRoutingService(RoutingService):
    """Routes looked up by destination key.

    Destinations without a configured result fail with RefinementError.
    Setting ``gate`` holds every request until the event is set.
    """

    def __init__(self) -> None:
        self.results: dict[tuple[float, float], RouteResult | Exception] = {}
        self.calls: list[tuple[float, float]] = []
        self.gate: Optional[asyncio.Event] = None

    def set_route(self, destination: Coordinates, distance_km: float, duration_min: Optional[float] = None) -> None:
        duration_s = duration_min * 60 if duration_min is not None else None
        self.results[destination.key] = RouteResult(distance_m=distance_km * 1000, duration_s=duration_s)

    async def route(self, origin: Coordinates, destination: Coordinates) -> RouteResult:
        self.calls.append(destination.key)
        if self.gate is not None:
            await self.gate.wait()
        await asyncio.sleep(0)
        result = self.results.get(destination.key)
        if result is None:
            raise RefinementError(f"No route to {destination.key}")
        if isinstance(result, Exception):
            raise result
        return result


def make_place(
    km: float,
    amenity: str = "pub",
    name: Optional[str] = "The Crown",
    osm_id: int = 1,
    osm_type: str = "node",
) -> OSMPlace:
    point = north_of_origin(km)
    tags = {"amenity": amenity}
    if name is not None:
        tags["name"] = name
    return OSMPlace(osm_id=str(osm_id), osm_type=osm_type, lat=point.lat, lon=point.lon, tags=tags)


def make_venue(name: str, km: float, confidence: Confidence = Confidence.HIGH) -> Venue:
    return Venue(
        name=name,
        coordinates=north_of_origin(km),
        category="pub",
        distance_km=km,
        walking_time_min=walking_minutes(km * 1000),
        confidence=confidence,
    )


def make_ranked(kms: list[float], generation: int = 1) -> RankedVenueList:
    venues = [make_venue(f"Pub {i}", km) for i, km in enumerate(kms)]
    return RankedVenueList(generation=generation, origin=ORIGIN, venues=venues)


@pytest.fixture
def routing() -> FakeRoutingService:
    return FakeRoutingService()


@pytest.fixture
def source() -> FakeVenueSource:
    return FakeVenueSource(places=[
        make_place(1.2, name="The Far Arms", osm_id=1),
        make_place(0.3, name="The Near Inn", osm_id=2),
        make_place(0.5, amenity="bar", name="Middle Bar", osm_id=3),
    ])


@pytest.fixture
def venue_factory():
    return make_venue


@pytest.fixture
def ranked_factory():
    return make_ranked


@pytest.fixture
def place_factory():
    return make_place


@pytest.fixture
def east():
    return east_of_origin


@pytest.fixture
def source_factory():
    return FakeVenueSource
