"""Periodic RSS harvester with per-site extraction and keyword relevance scoring."""

__version__ = "0.1.0"
