"""Shared helpers: geography, formatting and caching."""

from .cache import LRUCache
from .formatting import format_distance, format_duration, ordinal, rank_label
from .geo import (
    EARTH_RADIUS_KM,
    WALKING_SPEED_M_PER_MIN,
    distance_between,
    haversine_distance,
    map_search_url,
    walking_minutes,
)

__all__ = [
    "LRUCache",
    "format_distance",
    "format_duration",
    "ordinal",
    "rank_label",
    "EARTH_RADIUS_KM",
    "WALKING_SPEED_M_PER_MIN",
    "distance_between",
    "haversine_distance",
    "map_search_url",
    "walking_minutes",
]
