"""Daily route planning for field crews."""

__version__ = "0.1.0"
