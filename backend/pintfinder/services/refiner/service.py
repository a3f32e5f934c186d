"""Progressive distance refinement.

Discovery ranks venues by straight-line distance. The refiner upgrades a small
window of them to real walking distances in the background:

- First call on a fresh list: the first ``initial_window`` venues, then the
  whole list is resorted once the batch settles.
- Later calls (cursor moved): the current venue plus ``lookahead`` after it,
  updated in place without resorting so the browsing order stays stable.

Each venue is claimed (``needs_refinement`` cleared) synchronously, before any
request goes out, so overlapping windows never ask for the same venue twice.
A failed route keeps the estimate and is not retried.

Results are only applied while the list they were requested for is still the
active one; late answers for a replaced list are dropped.
"""

import asyncio
import logging
from typing import Callable, Optional

from pintfinder.config import get_settings
from pintfinder.models import DistanceQuality, RankedVenueList, RefinementError, Venue
from pintfinder.services.routing import RoutingService
from pintfinder.utils.geo import walking_minutes

logger = logging.getLogger(__name__)

VenueHook = Callable[[Venue], None]


class RouteRefiner:
    """Upgrades straight-line estimates to routed walking distances."""

    def __init__(
        self,
        routing: RoutingService,
        initial_window: int | None = None,
        lookahead: int | None = None,
        is_active: Callable[[RankedVenueList], bool] | None = None,
        current_venue: Callable[[], Optional[Venue]] | None = None,
        on_venue_updated: VenueHook | None = None,
    ) -> None:
        settings = get_settings()
        self._routing = routing
        self._initial_window = initial_window if initial_window is not None else settings.initial_window
        self._lookahead = lookahead if lookahead is not None else settings.lookahead
        self._is_active = is_active or (lambda ranked: True)
        self._current_venue = current_venue or (lambda: None)
        self._on_venue_updated = on_venue_updated

    def window(self, ranked: RankedVenueList, cursor_index: int) -> range:
        """Indices eligible for refinement at this cursor position."""
        if ranked.is_fresh:
            return range(0, min(self._initial_window, len(ranked)))
        return range(cursor_index, min(cursor_index + self._lookahead + 1, len(ranked)))

    def _claim(self, ranked: RankedVenueList, window: range) -> list[Venue]:
        claimed = []
        for index in window:
            venue = ranked[index]
            if venue.needs_refinement:
                venue.needs_refinement = False
                claimed.append(venue)
        return claimed

    def refine(self, ranked: RankedVenueList, cursor_index: int) -> Optional[asyncio.Task]:
        """Start refining the window around ``cursor_index``.

        Returns the background task, or None when every venue in the window
        has already been claimed. Must be called from a running event loop.
        """
        initial = ranked.is_fresh
        window = self.window(ranked, cursor_index)
        claimed = self._claim(ranked, window)
        if not claimed:
            return None

        logger.debug(
            f"[REFINE] gen={ranked.generation} window={window.start}-{window.stop - 1} "
            f"claimed={len(claimed)} initial={initial}"
        )
        return asyncio.get_running_loop().create_task(
            self._refine_batch(ranked, claimed, initial),
            name=f"refine-gen{ranked.generation}-{window.start}",
        )

    async def _refine_batch(
        self, ranked: RankedVenueList, venues: list[Venue], initial: bool
    ) -> int:
        results = await asyncio.gather(
            *(self._refine_one(ranked, v) for v in venues),
            return_exceptions=True,
        )
        upgraded = sum(1 for ok in results if ok is True)
        errors = [r for r in results if isinstance(r, BaseException)]

        if not self._is_active(ranked):
            logger.debug(f"[REFINE] gen={ranked.generation} replaced, skipping batch completion")
        else:
            # Venues that did get routed must not leave the list out of order
            if initial:
                ranked.sort()
            logger.info(
                f"[REFINE] gen={ranked.generation} routed {upgraded}/{len(venues)}"
                f"{' (resorted)' if initial else ''}"
            )

        if errors:
            # Surface unexpected failures to whoever owns the task
            raise errors[0]
        return upgraded

    async def _refine_one(self, ranked: RankedVenueList, venue: Venue) -> bool:
        try:
            result = await self._routing.route(ranked.origin, venue.coordinates)
        except RefinementError as e:
            logger.info(f"[REFINE] Keeping estimate for {venue.name}: {e}")
            return False

        if not self._is_active(ranked):
            logger.debug(f"[REFINE] Dropping stale route for {venue.name} (gen={ranked.generation})")
            return False

        venue.distance_km = result.distance_m / 1000
        if result.duration_s is not None:
            venue.walking_time_min = result.duration_s / 60
        else:
            venue.walking_time_min = walking_minutes(result.distance_m)
        venue.quality = DistanceQuality.ROUTED

        current = self._current_venue()
        if self._on_venue_updated and current is not None and current.key == venue.key:
            self._on_venue_updated(venue)
        return True
