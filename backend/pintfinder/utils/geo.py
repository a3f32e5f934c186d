"""Geographic helpers shared by discovery, refinement and crawl planning."""

import math

from pintfinder.models import Coordinates

EARTH_RADIUS_KM = 6371.0

# Reference walking speed used for every time estimate
WALKING_SPEED_M_PER_MIN = 80.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate great-circle distance between two points in km using Haversine formula"""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (math.sin(delta_phi / 2) ** 2 +
         math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def distance_between(a: Coordinates, b: Coordinates) -> float:
    """Haversine distance in km between two coordinates."""
    return haversine_distance(a.lat, a.lon, b.lat, b.lon)


def walking_minutes(distance_m: float) -> float:
    """Walking time in minutes for a distance in metres."""
    return distance_m / WALKING_SPEED_M_PER_MIN


def map_search_url(coordinates: Coordinates) -> str:
    """Google Maps search URL pointing at a coordinate."""
    return f"https://www.google.com/maps/search/?api=1&query={coordinates.lat},{coordinates.lon}"
