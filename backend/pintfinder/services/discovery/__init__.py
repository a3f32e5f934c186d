"""Venue discovery and classification."""

from .service import (
    DRINKING_TAGS,
    PUB_NAME_KEYWORDS,
    UNNAMED_VENUE,
    VenueDiscoverer,
    classify,
    name_suggests_pub,
)

__all__ = [
    "DRINKING_TAGS",
    "PUB_NAME_KEYWORDS",
    "UNNAMED_VENUE",
    "VenueDiscoverer",
    "classify",
    "name_suggests_pub",
]
