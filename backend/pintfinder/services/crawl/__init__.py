"""Multi-stop crawl planning."""

from .service import CrawlPlanner

__all__ = [
    "CrawlPlanner",
]
