"""Runtime configuration for Pint Finder.

Values come from environment variables (a local ``.env`` file is loaded first)
and fall back to the defaults below.
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


@dataclass(frozen=True)
class Settings:
    """Service endpoints, timeouts and ranking policy."""

    overpass_url: str = field(
        default_factory=lambda: os.getenv("OVERPASS_URL", "https://overpass-api.de/api/interpreter")
    )
    osrm_url: str = field(
        default_factory=lambda: os.getenv("OSRM_URL", "https://router.project-osrm.org")
    )
    user_agent: str = field(
        default_factory=lambda: os.getenv("PINTFINDER_USER_AGENT", "PintFinder/1.0 (contact@pintfinder.app)")
    )
    overpass_timeout: float = field(default_factory=lambda: _env_float("OVERPASS_TIMEOUT", 30.0))
    osrm_timeout: float = field(default_factory=lambda: _env_float("OSRM_TIMEOUT", 10.0))

    # Discovery policy
    search_radius_m: int = field(default_factory=lambda: _env_int("SEARCH_RADIUS_M", 3000))
    discovery_cache_size: int = field(default_factory=lambda: _env_int("DISCOVERY_CACHE_SIZE", 100))
    discovery_cache_ttl: int = field(default_factory=lambda: _env_int("DISCOVERY_CACHE_TTL", 300))

    # Refinement policy
    initial_window: int = field(default_factory=lambda: _env_int("REFINE_INITIAL_WINDOW", 5))
    lookahead: int = field(default_factory=lambda: _env_int("REFINE_LOOKAHEAD", 3))
    routing_concurrency: int = field(default_factory=lambda: _env_int("ROUTING_CONCURRENCY", 4))

    cors_origins: list[str] = field(
        default_factory=lambda: os.getenv(
            "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
        ).split(",")
    )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
