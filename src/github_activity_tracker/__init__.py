"""GitHub Activity Tracker - ingest and query GitHub repository activity."""

__version__ = "0.1.0"
