"""Per-user session aggregate."""

from .service import DirectionsLinkBuilder, Session

__all__ = [
    "DirectionsLinkBuilder",
    "Session",
]
