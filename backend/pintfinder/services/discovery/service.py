"""Venue discovery: query, classify, estimate, rank.

Pipeline:
1. Ask the venue source for drinking amenities around the origin
2. Classify each place (pub/bar/biergarten/social club in, restaurants only
   when their name gives them away, everything else out)
3. Attach a straight-line distance and walking-time estimate
4. Sort nearest first
"""

import logging
import re
from typing import Optional

from pintfinder.config import get_settings
from pintfinder.models import (
    Confidence,
    Coordinates,
    DistanceQuality,
    NoVenuesFoundError,
    RankedVenueList,
    Venue,
)
from pintfinder.services.osm import DRINKING_AMENITIES, OSMPlace, VenueSource
from pintfinder.utils.geo import distance_between, walking_minutes

logger = logging.getLogger(__name__)

UNNAMED_VENUE = "Unnamed Pub"

DRINKING_TAGS = frozenset({"pub", "bar", "biergarten", "social_club"})

# Restaurants whose names contain one of these are really pubs serving food
PUB_NAME_KEYWORDS = [
    "pub", "bar", "tavern", "inn", "alehouse", "taproom", "brewery", "brewpub",
    "beer hall", "biergarten", "beer garden", "social club", "working men",
    "british legion", "legion club", "arms", "lounge bar", "cocktail bar",
    "wine bar",
]

_KEYWORD_PATTERN = re.compile(
    r"\b(?:" + "|".join(re.escape(k) for k in PUB_NAME_KEYWORDS) + r")\b",
    re.IGNORECASE,
)


def name_suggests_pub(name: Optional[str]) -> bool:
    """True if a display name contains a pub keyword as a whole word."""
    return bool(name) and _KEYWORD_PATTERN.search(name) is not None


def classify(amenity: Optional[str], name: Optional[str]) -> Optional[Confidence]:
    """Decide whether a place counts as a drinking venue.

    Returns the confidence for included places, None for excluded ones.
    """
    if amenity in DRINKING_TAGS:
        return Confidence.HIGH
    if amenity == "restaurant" and name_suggests_pub(name):
        return Confidence.MEDIUM
    return None


class VenueDiscoverer:
    """Turns raw POI results into a ranked list of venues."""

    def __init__(self, source: VenueSource, radius_m: int | None = None) -> None:
        self._source = source
        self._radius_m = radius_m if radius_m is not None else get_settings().search_radius_m

    @property
    def radius_m(self) -> int:
        return self._radius_m

    async def close(self) -> None:
        await self._source.close()

    def _to_venue(self, place: OSMPlace, origin: Coordinates) -> Optional[Venue]:
        confidence = classify(place.amenity, place.name)
        if confidence is None:
            return None

        coordinates = place.coordinates
        distance_km = distance_between(origin, coordinates)
        return Venue(
            name=place.name or UNNAMED_VENUE,
            coordinates=coordinates,
            category=place.amenity,
            distance_km=distance_km,
            walking_time_min=walking_minutes(distance_km * 1000),
            quality=DistanceQuality.ESTIMATE,
            confidence=confidence,
        )

    async def discover(
        self,
        origin: Coordinates,
        radius_m: int | None = None,
        generation: int = 0,
    ) -> RankedVenueList:
        """Find venues around ``origin``, nearest first.

        Raises:
            DiscoveryError: the venue source failed.
            NoVenuesFoundError: nothing survived classification.
        """
        radius = radius_m if radius_m is not None else self._radius_m
        places = await self._source.query(origin, radius, DRINKING_AMENITIES)

        # Identity is the coordinate pair; a pub tag beats a restaurant name match
        by_key: dict[tuple[float, float], Venue] = {}
        excluded = 0
        for place in places:
            venue = self._to_venue(place, origin)
            if venue is None:
                excluded += 1
                continue
            existing = by_key.get(venue.key)
            if existing is None or (
                existing.confidence is Confidence.MEDIUM and venue.confidence is Confidence.HIGH
            ):
                by_key[venue.key] = venue
        venues = list(by_key.values())

        if not venues:
            logger.info(f"[DISCOVER] Nothing left after filtering {len(places)} places")
            raise NoVenuesFoundError(
                f"No venues within {radius}m of ({origin.lat:.4f}, {origin.lon:.4f})"
            )

        ranked = RankedVenueList(generation=generation, origin=origin, venues=venues)
        ranked.sort()
        logger.info(
            f"[DISCOVER] {len(venues)} venues ({excluded} excluded), "
            f"nearest: {ranked[0].name} at {ranked[0].distance_km:.2f}km"
        )
        return ranked
