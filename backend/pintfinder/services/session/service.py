"""Session aggregate.

One ``Session`` per user holds everything that changes while they look for a
pint: the ranked list from the latest discovery, the browsing cursor, and the
crawl itinerary. Every operation is a method here; nothing lives in module
state.

Discovery bumps a generation counter. Background refinement tasks carry the
generation of the list they were started for, so results that arrive after a
re-discovery are dropped instead of landing on the new list.
"""

import asyncio
import logging
from typing import Optional, Protocol
from uuid import uuid4

from pintfinder.models import Coordinates, NoResultsError, RankedVenueList, Venue
from pintfinder.services.crawl import CrawlPlanner
from pintfinder.services.discovery import VenueDiscoverer
from pintfinder.services.navigation import NavigationCursor, StepResult
from pintfinder.services.refiner import RouteRefiner, VenueHook
from pintfinder.services.routing import RoutingService

logger = logging.getLogger(__name__)


class DirectionsLinkBuilder(Protocol):
    """Builds a navigation-app link for a venue and a provider id."""

    def __call__(self, coordinates: Coordinates, name: str, provider: str) -> str: ...


class Session:
    """Ranked list, navigation state and crawl itinerary for one user."""

    def __init__(
        self,
        discoverer: VenueDiscoverer,
        routing: RoutingService,
        on_venue_updated: VenueHook | None = None,
        link_builder: DirectionsLinkBuilder | None = None,
        session_id: str | None = None,
    ) -> None:
        self.id = session_id or uuid4().hex
        self._discoverer = discoverer
        self._link_builder = link_builder
        self._generation = 0
        self._ranked: Optional[RankedVenueList] = None
        self._tasks: set[asyncio.Task] = set()

        self.cursor = NavigationCursor()
        self.crawl = CrawlPlanner()
        self.refiner = RouteRefiner(
            routing,
            is_active=self.is_active,
            current_venue=lambda: self.cursor.current,
            on_venue_updated=on_venue_updated,
        )

    @property
    def ranked(self) -> Optional[RankedVenueList]:
        return self._ranked

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def current(self) -> Optional[Venue]:
        return self.cursor.current

    @property
    def pending_refinements(self) -> int:
        return len(self._tasks)

    def is_active(self, ranked: RankedVenueList) -> bool:
        """True if ``ranked`` is still the list the user is browsing."""
        return self._ranked is not None and self._ranked.generation == ranked.generation

    def _require_ranked(self) -> RankedVenueList:
        if self._ranked is None:
            raise NoResultsError("No discovery has completed in this session")
        return self._ranked

    # ─── Discovery ───

    async def discover(self, origin: Coordinates, radius_m: int | None = None) -> RankedVenueList:
        """Run a discovery cycle and start browsing its results.

        Raises DiscoveryError / NoVenuesFoundError; the previous list, if any,
        stays in place when discovery fails.
        """
        self._generation += 1
        generation = self._generation
        ranked = await self._discoverer.discover(origin, radius_m, generation=generation)

        if generation != self._generation:
            # A newer discovery started while this one was in flight
            logger.info(f"[SESSION] {self.id[:8]} discarding superseded discovery gen={generation}")
            return ranked

        self._ranked = ranked
        self.cursor.start_browsing(ranked)
        if self.crawl.start is None:
            self.crawl.set_start(origin)
        self._spawn_refinement()
        return ranked

    async def find_another(self, origin: Coordinates | None = None) -> Optional[Venue]:
        """Step to the next venue, searching again if there is nothing to step to."""
        ranked = self._require_ranked()
        if self.next() is StepResult.REDISCOVER:
            logger.info(f"[SESSION] {self.id[:8]} only {len(ranked)} venue(s), searching again")
            await self.discover(origin or ranked.origin)
        return self.current

    # ─── Navigation ───

    def next(self) -> StepResult:
        result = self.cursor.next()
        if result is StepResult.MOVED:
            self._spawn_refinement()
        return result

    def back(self) -> StepResult:
        result = self.cursor.back()
        if result is StepResult.MOVED:
            self._spawn_refinement()
        return result

    def directions_link(self, provider: str) -> Optional[str]:
        venue = self.current
        if venue is None or self._link_builder is None:
            return None
        return self._link_builder(venue.coordinates, venue.name, provider)

    # ─── Refinement ───

    def _spawn_refinement(self) -> None:
        task = self.refiner.refine(self._ranked, self.cursor.cursor_index)
        if task is None:
            return
        self._tasks.add(task)
        task.add_done_callback(self._on_refinement_done)

    def _on_refinement_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"[SESSION] {self.id[:8]} refinement task {task.get_name()} failed: {exc!r}")

    async def wait_for_refinement(self) -> None:
        """Wait until every refinement task started so far has settled."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ─── Crawl ───

    def add_to_crawl(self, index: int | None = None) -> bool:
        """Add a venue from the ranked list (default: the current one) to the crawl.

        Returns False if the venue is already a waypoint.
        """
        ranked = self._require_ranked()
        position = self.cursor.cursor_index if index is None else index
        if not 0 <= position < len(ranked):
            raise IndexError(f"Venue index {position} out of range (0-{len(ranked) - 1})")
        return self.crawl.add_waypoint(ranked[position])
