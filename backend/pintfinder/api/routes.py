"""API routes for Pint Finder.

Each browser tab gets a session (``POST /sessions``); every other endpoint
drives that session:

- Discovery: client sends its position, gets the nearest venue back
- Browsing: next/back through the ranked list, routed distances filling in
  behind the scenes
- Crawl: pick venues into an itinerary, reorder, export as text

Errors are raised as ``PintFinderError`` and turned into JSON by the
handlers registered in ``pintfinder.main``.
"""

import logging
from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from pintfinder.config import get_settings
from pintfinder.models import (
    AppError,
    Coordinates,
    CrawlStats,
    NoResultsError,
    SessionNotFoundError,
    Venue,
)
from pintfinder.services import (
    FixedGeoLocator,
    OSRMRoutingService,
    OverpassVenueSource,
    Session,
    StepResult,
    VenueDiscoverer,
)
from pintfinder.utils.cache import LRUCache
from pintfinder.utils.formatting import format_distance, format_duration, rank_label

logger = logging.getLogger(__name__)

router = APIRouter()

SESSION_TTL_SECONDS = 4 * 3600

_sessions = LRUCache(max_size=1000, ttl_seconds=SESSION_TTL_SECONDS)

# Service instances
_discoverer: VenueDiscoverer | None = None
_routing_service: OSRMRoutingService | None = None


def get_discoverer() -> VenueDiscoverer:
    global _discoverer
    if _discoverer is None:
        _discoverer = VenueDiscoverer(OverpassVenueSource())
    return _discoverer


def get_routing_service() -> OSRMRoutingService:
    global _routing_service
    if _routing_service is None:
        _routing_service = OSRMRoutingService()
    return _routing_service


async def close_services() -> None:
    """Close shared HTTP clients (called on application shutdown)."""
    if _discoverer is not None:
        await _discoverer.close()
    if _routing_service is not None:
        await _routing_service.close()


def get_session(session_id: str) -> Session:
    session = _sessions.get(session_id)
    if session is None:
        raise SessionNotFoundError(f"Unknown session {session_id}")
    # Refresh the TTL on every use
    _sessions.set(session_id, session)
    return session


def _on_venue_updated(venue: Venue) -> None:
    logger.debug(f"[API] Displayed venue refined: {venue.name} {venue.distance_km:.2f}km")


# Request/Response models
class VenueView(BaseModel):
    """A venue as shown to the user."""
    index: int
    rank_label: str
    venue: Venue
    distance_text: str
    walking_time_text: str


class BrowseResponse(BaseModel):
    """Current browsing position."""
    success: bool = True
    session_id: str
    current: Optional[VenueView] = None
    total: int = 0
    can_go_back: bool = False
    generation: int = 0
    error: Optional[AppError] = None


class CreateSessionResponse(BaseModel):
    success: bool = True
    session_id: str


class DiscoverRequest(BaseModel):
    """Position reported by the client, or the reason it has none."""
    lat: Optional[float] = Field(default=None, description="Latitude in degrees")
    lon: Optional[float] = Field(default=None, description="Longitude in degrees")
    location_error: Optional[str] = Field(
        default=None,
        description="permission_denied | unavailable | timeout | unsupported",
    )
    radius_m: Optional[int] = Field(default=None, ge=100, le=10000)


class NextRequest(BaseModel):
    """Optional fresh position, used if browsing has to search again."""
    lat: Optional[float] = Field(default=None, ge=-90, le=90)
    lon: Optional[float] = Field(default=None, ge=-180, le=180)


class VenueListResponse(BaseModel):
    success: bool = True
    session_id: str
    venues: list[VenueView] = Field(default_factory=list)


class AddWaypointRequest(BaseModel):
    index: Optional[int] = Field(default=None, ge=0, description="Ranked-list index; current venue if omitted")


class ReorderRequest(BaseModel):
    from_index: int
    to_index: int


class CrawlResponse(BaseModel):
    success: bool = True
    session_id: str
    start: Optional[Coordinates] = None
    waypoints: list[Venue] = Field(default_factory=list)
    stats: CrawlStats
    summary: str
    directions_url: str = ""
    changed: bool = True
    duplicate: bool = False


class ExportResponse(BaseModel):
    success: bool = True
    session_id: str
    text: str


def _venue_view(index: int, venue: Venue) -> VenueView:
    return VenueView(
        index=index,
        rank_label=rank_label(index),
        venue=venue,
        distance_text=format_distance(venue.distance_km),
        walking_time_text=format_duration(venue.walking_time_min),
    )


def _browse_response(session: Session) -> BrowseResponse:
    current = session.current
    ranked = session.ranked
    return BrowseResponse(
        session_id=session.id,
        current=_venue_view(session.cursor.cursor_index, current) if current else None,
        total=len(ranked) if ranked else 0,
        can_go_back=session.cursor.can_go_back,
        generation=ranked.generation if ranked else 0,
    )


def _crawl_response(session: Session, changed: bool = True, duplicate: bool = False) -> CrawlResponse:
    crawl = session.crawl
    return CrawlResponse(
        session_id=session.id,
        start=crawl.start,
        waypoints=list(crawl.waypoints),
        stats=crawl.aggregate(),
        summary=crawl.summary_line(),
        directions_url=crawl.directions_url(),
        changed=changed,
        duplicate=duplicate,
    )


# ─── Sessions & browsing ───

@router.post("/sessions", response_model=CreateSessionResponse)
async def create_session() -> CreateSessionResponse:
    session = Session(
        get_discoverer(),
        get_routing_service(),
        on_venue_updated=_on_venue_updated,
    )
    _sessions.set(session.id, session)
    logger.info(f"[API] Session {session.id[:8]} created")
    return CreateSessionResponse(session_id=session.id)


@router.post("/sessions/{session_id}/discover", response_model=BrowseResponse)
async def discover(session_id: str, request: DiscoverRequest) -> BrowseResponse:
    """Find venues around the reported position and show the nearest."""
    session = get_session(session_id)
    locator = FixedGeoLocator(request.lat, request.lon, request.location_error)
    origin = await locator.get_current_position()

    radius = request.radius_m or get_settings().search_radius_m
    logger.info(f"[API] Session {session_id[:8]} discover at ({origin.lat:.4f}, {origin.lon:.4f}) r={radius}m")
    await session.discover(origin, radius)
    return _browse_response(session)


@router.get("/sessions/{session_id}/current", response_model=BrowseResponse)
async def current(session_id: str) -> BrowseResponse:
    return _browse_response(get_session(session_id))


@router.post("/sessions/{session_id}/next", response_model=BrowseResponse)
async def next_venue(session_id: str, request: Optional[NextRequest] = None) -> BrowseResponse:
    """Show the next-nearest venue, searching again if the list is exhausted."""
    session = get_session(session_id)
    origin = None
    if request is not None and request.lat is not None and request.lon is not None:
        origin = Coordinates(lat=request.lat, lon=request.lon)
    await session.find_another(origin)
    return _browse_response(session)


@router.post("/sessions/{session_id}/back", response_model=BrowseResponse)
async def previous_venue(session_id: str) -> BrowseResponse:
    session = get_session(session_id)
    if session.ranked is None:
        raise NoResultsError("Nothing to go back to")
    session.back()
    return _browse_response(session)


@router.get("/sessions/{session_id}/venues", response_model=VenueListResponse)
async def list_venues(session_id: str) -> VenueListResponse:
    session = get_session(session_id)
    ranked = session.ranked
    venues = [_venue_view(i, v) for i, v in enumerate(ranked)] if ranked else []
    return VenueListResponse(session_id=session.id, venues=venues)


@router.get("/sessions/{session_id}/directions")
async def directions(session_id: str, provider: str = "google") -> dict:
    """Deep link for the current venue, if a link builder is configured."""
    session = get_session(session_id)
    return {"success": True, "session_id": session.id, "url": session.directions_link(provider)}


# ─── Crawl ───

@router.get("/sessions/{session_id}/crawl", response_model=CrawlResponse)
async def get_crawl(session_id: str) -> CrawlResponse:
    return _crawl_response(get_session(session_id), changed=False)


@router.post("/sessions/{session_id}/crawl/waypoints", response_model=CrawlResponse)
async def add_waypoint(session_id: str, request: AddWaypointRequest) -> CrawlResponse:
    session = get_session(session_id)
    try:
        added = session.add_to_crawl(request.index)
    except IndexError as e:
        raise NoResultsError(str(e), user_message="That pub is no longer in the list.") from e
    return _crawl_response(session, changed=added, duplicate=not added)


@router.delete("/sessions/{session_id}/crawl/waypoints/{index}", response_model=CrawlResponse)
async def remove_waypoint(session_id: str, index: int) -> CrawlResponse:
    session = get_session(session_id)
    removed = session.crawl.remove_waypoint(index)
    return _crawl_response(session, changed=removed)


@router.post("/sessions/{session_id}/crawl/reorder", response_model=CrawlResponse)
async def reorder_waypoints(session_id: str, request: ReorderRequest) -> CrawlResponse:
    session = get_session(session_id)
    moved = session.crawl.reorder(request.from_index, request.to_index)
    return _crawl_response(session, changed=moved)


@router.get("/sessions/{session_id}/crawl/export", response_model=ExportResponse)
async def export_crawl(session_id: str) -> ExportResponse:
    session = get_session(session_id)
    return ExportResponse(session_id=session.id, text=session.crawl.export_text())


@router.delete("/sessions/{session_id}/crawl", response_model=CrawlResponse)
async def clear_crawl(session_id: str, keep_start: bool = True) -> CrawlResponse:
    session = get_session(session_id)
    session.crawl.clear(keep_start=keep_start)
    return _crawl_response(session)
