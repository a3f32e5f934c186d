"""Ranked-list browsing with back-navigation."""

from .service import CursorState, NavigationCursor, StepResult

__all__ = [
    "CursorState",
    "NavigationCursor",
    "StepResult",
]
