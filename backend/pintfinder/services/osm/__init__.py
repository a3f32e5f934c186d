"""OpenStreetMap Overpass venue source."""

from .service import DRINKING_AMENITIES, OSMPlace, OverpassVenueSource, VenueSource

__all__ = [
    "DRINKING_AMENITIES",
    "OSMPlace",
    "OverpassVenueSource",
    "VenueSource",
]
