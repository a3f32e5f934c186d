"""OpenStreetMap Overpass API client for nearby venue queries.

This is the point-of-interest source for discovery:
- Real places that actually exist
- Accurate coordinates (ways are reduced to their center)
- Raw OSM tags, classified later by the discoverer

Architecture:
1. Build an Overpass QL query with an ``around:`` filter per amenity value
2. POST it to the interpreter
3. Parse nodes and ways into ``OSMPlace`` records

Responses are cached for a few minutes per (rounded origin, radius, amenities).
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

import httpx

from pintfinder.config import get_settings
from pintfinder.models import Coordinates, DiscoveryError
from pintfinder.utils.cache import LRUCache

logger = logging.getLogger(__name__)

# Amenity values worth asking Overpass about. Restaurants are fetched too but
# only survive classification if their name says they are really a pub.
DRINKING_AMENITIES = ["pub", "bar", "biergarten", "social_club", "restaurant"]


@dataclass
class OSMPlace:
    """Raw place data from OpenStreetMap."""
    osm_id: str
    osm_type: str  # node, way
    lat: float
    lon: float
    tags: dict = field(default_factory=dict)

    @property
    def name(self) -> Optional[str]:
        return self.tags.get("name")

    @property
    def amenity(self) -> Optional[str]:
        return self.tags.get("amenity")

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(lat=self.lat, lon=self.lon)


class VenueSource(ABC):
    """Abstract point-of-interest source."""

    @abstractmethod
    async def query(
        self, origin: Coordinates, radius_m: int, categories: list[str]
    ) -> list[OSMPlace]:
        """Return raw places within ``radius_m`` of ``origin``.

        Raises:
            DiscoveryError: the source is unreachable or answers with an error.
        """
        pass

    async def close(self) -> None:
        pass


class OverpassVenueSource(VenueSource):
    """Overpass API implementation of ``VenueSource``."""

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        cache: LRUCache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self._url = url or settings.overpass_url
        self._timeout = timeout if timeout is not None else settings.overpass_timeout
        self._headers = {"User-Agent": settings.user_agent}
        self._cache = cache if cache is not None else LRUCache(
            max_size=settings.discovery_cache_size,
            ttl_seconds=settings.discovery_cache_ttl,
        )
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

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

    @staticmethod
    def _cache_key(origin: Coordinates, radius_m: int, categories: list[str]) -> str:
        # ~11 m at 4 decimals, so moving down the street gives a fresh query
        return f"overpass:{origin.lat:.4f},{origin.lon:.4f}:{radius_m}:{','.join(sorted(categories))}"

    def _build_overpass_query(
        self, origin: Coordinates, radius_m: int, categories: list[str]
    ) -> str:
        """Build Overpass QL query for amenities around a point."""
        around = f"around:{radius_m},{origin.lat},{origin.lon}"
        tag_queries = []
        for value in categories:
            tag_queries.append(f'node["amenity"="{value}"]({around});')
            tag_queries.append(f'way["amenity"="{value}"]({around});')

        return f"""
[out:json][timeout:25];
(
  {chr(10).join(tag_queries)}
);
out center;
"""

    async def _fetch(self, query: str) -> dict:
        try:
            response = await self._get_client().post(
                self._url,
                data={"data": query},
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"[OVERPASS] Bad status {e.response.status_code}")
            raise DiscoveryError(f"Overpass returned status {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.warning(f"[OVERPASS] Request failed: {type(e).__name__}: {e}")
            raise DiscoveryError(f"Overpass unreachable: {e}") from e
        except ValueError as e:
            raise DiscoveryError("Overpass returned an unreadable response") from e

        if not isinstance(data, dict):
            raise DiscoveryError("Overpass returned an unexpected response")
        # Server-side timeouts and memory limits come back as 200 with a remark
        remark = str(data.get("remark") or "")
        if "runtime error" in remark:
            logger.warning(f"[OVERPASS] {remark}")
            raise DiscoveryError(f"Overpass query failed: {remark}")
        return data

    async def query(
        self, origin: Coordinates, radius_m: int, categories: list[str]
    ) -> list[OSMPlace]:
        """Query amenities within ``radius_m`` of ``origin``."""
        key = self._cache_key(origin, radius_m, categories)
        data = self._cache.get(key)
        if data is not None:
            logger.info(f"[OVERPASS] Cache HIT for ({origin.lat:.4f}, {origin.lon:.4f})")
        else:
            query = self._build_overpass_query(origin, radius_m, categories)
            data = await self._fetch(query)
            self._cache.set(key, data)

        places = self._parse_elements(data.get("elements", []))
        logger.info(f"[OVERPASS] {len(places)} places within {radius_m}m")
        return places

    @staticmethod
    def _parse_elements(elements: list[dict]) -> list[OSMPlace]:
        places = []
        for element in elements:
            # Get coordinates (center for ways)
            if element.get("type") == "node":
                lat = element.get("lat")
                lon = element.get("lon")
            elif "center" in element:
                lat = element["center"].get("lat")
                lon = element["center"].get("lon")
            else:
                continue

            if lat is None or lon is None:
                continue

            places.append(OSMPlace(
                osm_id=str(element.get("id", "")),
                osm_type=element.get("type", "node"),
                lat=float(lat),
                lon=float(lon),
                tags=element.get("tags") or {},
            ))
        return places
