"""calendar-compat: legacy calendar API bridge over a modern calendar authority."""

__version__ = "0.1.0"
