"""Deep links into the external turn-by-turn navigation app."""

from __future__ import annotations

from typing import Optional, Sequence
from urllib.parse import quote

# Same unreserved set as a browser's encodeURIComponent.
_SAFE_CHARACTERS = "-_.!~*'()"

DEFAULT_BASE_URL = "https://www.google.com/maps/dir/"
DEFAULT_WAYPOINT_SEPARATOR = "%7C"


def _encode(address: str) -> str:
    return quote(address, safe=_SAFE_CHARACTERS)


def compose_map_url(
    ordered_addresses: Sequence[str],
    *,
    base_url: str = DEFAULT_BASE_URL,
    travel_mode: str = "driving",
    waypoint_separator: str = DEFAULT_WAYPOINT_SEPARATOR,
) -> Optional[str]:
    """Serialize an ordered list of addresses into a navigation URL.

    One address yields a destination-only link. With two or more, the first is
    the origin, the last is the destination and everything between becomes a
    waypoint. The navigation app geocodes the addresses itself.
    """
    if not ordered_addresses:
        return None

    encoded = [_encode(address) for address in ordered_addresses]
    mode = _encode(travel_mode)
    if len(encoded) == 1:
        return f"{base_url}?api=1&destination={encoded[0]}&travelmode={mode}"

    origin, *waypoints, destination = encoded
    url = f"{base_url}?api=1&origin={origin}&destination={destination}&travelmode={mode}"
    if waypoints:
        url += f"&waypoints={waypoint_separator.join(waypoints)}"
    return url
