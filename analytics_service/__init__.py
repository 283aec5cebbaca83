"""Analytics service: keyset-paginated listings over analytical event tables."""

__version__ = "0.1.0"
