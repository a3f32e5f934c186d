"""Walking routes using OSRM (free, open-source routing).

Uses the Open Source Routing Machine ``route`` service with the foot profile
to upgrade straight-line estimates to real walking distances.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx

from pintfinder.config import get_settings
from pintfinder.models import Coordinates, RefinementError

logger = logging.getLogger(__name__)


@dataclass
class RouteResult:
    """Distance/duration of a single walking route."""
    distance_m: float
    duration_s: Optional[float] = None


class RoutingService(ABC):
    """Abstract base class for walking-route lookups."""

    @abstractmethod
    async def route(self, origin: Coordinates, destination: Coordinates) -> RouteResult:
        """Walking route from ``origin`` to ``destination``.

        Raises:
            RefinementError: no route could be obtained.
        """
        pass

    async def close(self) -> None:
        pass


class OSRMRoutingService(RoutingService):
    """OSRM-based routing service"""

    PROFILE = "foot"

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        max_concurrency: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._url = (url or settings.osrm_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.osrm_timeout
        self._headers = {"User-Agent": settings.user_agent}
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        # Public OSRM server rate-limits; overlapping windows share this bound
        self._semaphore = asyncio.Semaphore(max_concurrency or settings.routing_concurrency)

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                headers=self._headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def route(self, origin: Coordinates, destination: Coordinates) -> RouteResult:
        coords = f"{origin.lon},{origin.lat};{destination.lon},{destination.lat}"
        url = f"{self._url}/route/v1/{self.PROFILE}/{coords}"

        try:
            async with self._semaphore:
                response = await self._get_client().get(url, params={
                    "overview": "false",
                    "steps": "false",
                })
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise RefinementError(f"OSRM request failed: {type(e).__name__}: {e}") from e
        except ValueError as e:
            raise RefinementError("OSRM returned an unreadable response") from e

        if not isinstance(data, dict):
            raise RefinementError(f"OSRM returned {type(data).__name__}, expected an object")
        routes = data.get("routes")
        if data.get("code") != "Ok" or not routes or not isinstance(routes, list):
            raise RefinementError(f"OSRM returned no route: {data.get('code')}")

        route_data = routes[0]
        if not isinstance(route_data, dict):
            raise RefinementError("OSRM route is not an object")
        distance = route_data.get("distance")
        if distance is None:
            raise RefinementError("OSRM route has no distance")

        duration = route_data.get("duration")
        try:
            result = RouteResult(
                distance_m=float(distance),
                duration_s=float(duration) if duration is not None else None,
            )
        except (TypeError, ValueError) as e:
            raise RefinementError(f"OSRM route has non-numeric values: {e}") from e
        logger.debug(f"[ROUTE] OSRM success: distance={distance}m, duration={duration}s")
        return result
