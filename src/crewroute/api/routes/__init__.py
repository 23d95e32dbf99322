"""Route group exports."""

from . import health, route_plans

__all__ = ["health", "route_plans"]
