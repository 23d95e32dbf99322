"""Geospatial helper functions."""

from __future__ import annotations

import math

from ..models.domain import Coordinate

EARTH_RADIUS_MILES = 3958.8


def haversine_miles(a: Coordinate, b: Coordinate, radius_miles: float = EARTH_RADIUS_MILES) -> float:
    """Compute great-circle distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(a.latitude), math.radians(b.latitude)
    d_phi = math.radians(b.latitude - a.latitude)
    d_lambda = math.radians(b.longitude - a.longitude)

    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # Rounding can push h a hair outside [0, 1] for antipodal points.
    h = min(1.0, max(0.0, h))
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return radius_miles * c


def is_valid_coordinate(latitude: float | None, longitude: float | None) -> bool:
    """Return True if both values are finite and inside the WGS84 ranges."""

    if latitude is None or longitude is None:
        return False
    return Coordinate(latitude=float(latitude), longitude=float(longitude)).is_valid()
