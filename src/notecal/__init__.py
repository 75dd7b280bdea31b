"""notecal - calendar events kept as lines in daily notes."""

__version__ = "0.1.0"
