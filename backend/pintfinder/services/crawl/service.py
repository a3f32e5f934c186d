"""Crawl planner: an ordered, deduplicated list of pubs to visit.

Waypoints are snapshots of the venues the user picked, so later refinement or
re-discovery never changes an itinerary behind the user's back. Distances
between stops are always straight-line; the crawl is planned, not routed.
"""

import logging
from typing import Optional

from pintfinder.models import Coordinates, CrawlItinerary, CrawlStats, Venue
from pintfinder.utils.formatting import format_distance, format_duration
from pintfinder.utils.geo import distance_between, map_search_url, walking_minutes

logger = logging.getLogger(__name__)


class CrawlPlanner:
    """Owns a CrawlItinerary and the operations on it."""

    def __init__(self, start: Optional[Coordinates] = None) -> None:
        self.itinerary = CrawlItinerary(start=start)

    @property
    def start(self) -> Optional[Coordinates]:
        return self.itinerary.start

    @property
    def waypoints(self) -> list[Venue]:
        return self.itinerary.waypoints

    def __len__(self) -> int:
        return len(self.itinerary.waypoints)

    def set_start(self, start: Optional[Coordinates]) -> None:
        self.itinerary.start = start

    def contains(self, venue: Venue) -> bool:
        return any(w.key == venue.key for w in self.itinerary.waypoints)

    def add_waypoint(self, venue: Venue) -> bool:
        """Append a venue. Returns False if it is already in the crawl."""
        if self.contains(venue):
            logger.debug(f"[CRAWL] {venue.name} already in crawl")
            return False
        self.itinerary.waypoints.append(venue.model_copy(deep=True))
        logger.debug(f"[CRAWL] Added {venue.name} ({len(self)} stops)")
        return True

    def remove_waypoint(self, index: int) -> bool:
        if not 0 <= index < len(self):
            return False
        removed = self.itinerary.waypoints.pop(index)
        logger.debug(f"[CRAWL] Removed {removed.name} ({len(self)} stops)")
        return True

    def reorder(self, from_index: int, to_index: int) -> bool:
        """Move the waypoint at ``from_index`` so it ends up at ``to_index``."""
        count = len(self)
        if not (0 <= from_index < count and 0 <= to_index < count):
            return False
        waypoints = self.itinerary.waypoints
        waypoints.insert(to_index, waypoints.pop(from_index))
        return True

    def aggregate(self) -> CrawlStats:
        """Total straight-line distance and walking time, start through every stop."""
        start = self.itinerary.start
        waypoints = self.itinerary.waypoints
        if start is None or not waypoints:
            return CrawlStats(stops=len(waypoints))

        total_km = 0.0
        previous = start
        for waypoint in waypoints:
            total_km += distance_between(previous, waypoint.coordinates)
            previous = waypoint.coordinates

        return CrawlStats(
            stops=len(waypoints),
            distance_km=total_km,
            walking_time_min=walking_minutes(total_km * 1000),
        )

    def summary_line(self) -> str:
        stats = self.aggregate()
        return (
            f"{stats.stops} pubs • {format_distance(stats.distance_km)}"
            f" • {format_duration(stats.walking_time_min)}"
        )

    def export_text(self) -> str:
        """Plain-text itinerary for sharing or copying to the clipboard."""
        lines = []
        start = self.itinerary.start
        if start is not None:
            lines.append(f"Start: {start.lat:.5f}, {start.lon:.5f}")
            lines.append("")

        for i, waypoint in enumerate(self.itinerary.waypoints):
            lines.append(f"{i + 1}. {waypoint.name}\n   {map_search_url(waypoint.coordinates)}")

        lines.append("")
        lines.append(self.summary_line())
        return "\n".join(lines)

    def directions_url(self) -> str:
        """Google Maps walking directions through every stop, in order.

        Format:
        https://www.google.com/maps/dir/?api=1&origin=...&destination=...&waypoints=...&travelmode=walking
        """
        waypoints = self.itinerary.waypoints
        if not waypoints:
            return ""

        def to_coord(c: Coordinates) -> str:
            return f"{c.lat},{c.lon}"

        start = self.itinerary.start
        stops = [to_coord(w.coordinates) for w in waypoints]
        if start is not None:
            origin = to_coord(start)
            via = stops[:-1]
        else:
            origin = stops[0]
            via = stops[1:-1]
        destination = stops[-1]

        url = (
            f"https://www.google.com/maps/dir/?api=1&origin={origin}"
            f"&destination={destination}&travelmode=walking"
        )
        if via:
            url += f"&waypoints={'%7C'.join(via)}"
        return url

    def clear(self, keep_start: bool = True) -> None:
        self.itinerary.waypoints.clear()
        if not keep_start:
            self.itinerary.start = None
        logger.debug(f"[CRAWL] Cleared (keep_start={keep_start})")
