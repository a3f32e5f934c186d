"""Walking-route lookups (OSRM)."""

from .service import OSRMRoutingService, RouteResult, RoutingService

__all__ = [
    "OSRMRoutingService",
    "RouteResult",
    "RoutingService",
]
