"""Browse/back state machine over a ranked venue list.

States:
- IDLE:     no list yet
- BROWSING: list present, cursor_index valid

``next()`` wraps around the list and records where it came from; ``back()``
walks that history in reverse. There is no terminal state: a new discovery
cycle simply starts browsing again.
"""

from enum import Enum
from typing import Optional

from pintfinder.models import RankedVenueList, Venue


class CursorState(str, Enum):
    IDLE = "idle"
    BROWSING = "browsing"


class StepResult(str, Enum):
    """Outcome of a navigation command."""

    MOVED = "moved"
    NOOP = "noop"
    REDISCOVER = "rediscover"  # list too short to browse, caller should search again


class NavigationCursor:
    """Cursor plus back-history over a RankedVenueList."""

    def __init__(self) -> None:
        self._ranked: Optional[RankedVenueList] = None
        self.cursor_index = 0
        self.history: list[int] = []

    @property
    def state(self) -> CursorState:
        if self._ranked is None or len(self._ranked) == 0:
            return CursorState.IDLE
        return CursorState.BROWSING

    @property
    def current(self) -> Optional[Venue]:
        if self.state is CursorState.IDLE:
            return None
        return self._ranked[self.cursor_index]

    @property
    def can_go_back(self) -> bool:
        return bool(self.history)

    def start_browsing(self, ranked: RankedVenueList) -> None:
        self._ranked = ranked
        self.cursor_index = 0
        self.history.clear()

    def reset(self) -> None:
        self._ranked = None
        self.cursor_index = 0
        self.history.clear()

    def next(self) -> StepResult:
        if self.state is CursorState.IDLE:
            return StepResult.NOOP
        if len(self._ranked) <= 1:
            return StepResult.REDISCOVER

        self.history.append(self.cursor_index)
        self.cursor_index = (self.cursor_index + 1) % len(self._ranked)
        return StepResult.MOVED

    def back(self) -> StepResult:
        if self.state is CursorState.IDLE or not self.history:
            return StepResult.NOOP

        self.cursor_index = self.history.pop()
        return StepResult.MOVED
