"""
REST API for the company registry.

Exposes the SQLite ``Companies`` table via HTTP endpoints: filtered and
paginated listings, single-company lookup, and aggregate statistics for the
dashboard's summary cards.
"""

__version__ = "1.0.0"
