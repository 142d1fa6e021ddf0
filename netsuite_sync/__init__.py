"""NetSuite saved-search to Postgres sync service."""

__version__ = "0.1.0"
