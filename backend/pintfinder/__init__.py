"""Pint Finder: nearest-pub discovery, browsing and crawl planning."""

__version__ = "0.1.0"
