"""Deduplication and monthly archival store for published job postings."""

__version__ = "0.3.0"
