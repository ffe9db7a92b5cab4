"""Favorites, recents, tags, launch profiles and fuzzy directory search for a terminal launcher."""

__version__ = "0.1.0"
