"""Pint Finder Services.

Service layer components:
- OSM: OpenStreetMap Overpass API venue source
- Discovery: classification and straight-line ranking of venues
- Routing: OSRM walking routes
- Refiner: background upgrade of estimates to routed distances
- Navigation: browse/back cursor over the ranked list
- Crawl: multi-stop itinerary planning
- Geolocation: origin lookup
- Session: the per-user aggregate tying them together
"""

from .crawl import CrawlPlanner
from .discovery import VenueDiscoverer, classify
from .geolocation import FixedGeoLocator, GeoLocator
from .navigation import CursorState, NavigationCursor, StepResult
from .osm import OSMPlace, OverpassVenueSource, VenueSource
from .refiner import RouteRefiner
from .routing import OSRMRoutingService, RouteResult, RoutingService
from .session import DirectionsLinkBuilder, Session

__all__ = [
    # Crawl
    "CrawlPlanner",
    # Discovery
    "VenueDiscoverer",
    "classify",
    # Geolocation
    "FixedGeoLocator",
    "GeoLocator",
    # Navigation
    "CursorState",
    "NavigationCursor",
    "StepResult",
    # OSM
    "OSMPlace",
    "OverpassVenueSource",
    "VenueSource",
    # Refinement
    "RouteRefiner",
    # Routing
    "OSRMRoutingService",
    "RouteResult",
    "RoutingService",
    # Session
    "DirectionsLinkBuilder",
    "Session",
]
