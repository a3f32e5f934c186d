"""HTTP API."""

from .routes import close_services, router

__all__ = ["close_services", "router"]
