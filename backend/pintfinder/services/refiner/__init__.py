"""Background routed-distance refinement."""

from .service import RouteRefiner, VenueHook

__all__ = [
    "RouteRefiner",
    "VenueHook",
]
