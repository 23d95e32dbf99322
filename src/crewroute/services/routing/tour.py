"""Nearest-neighbour visiting order for a single crew's day.

The tour starts at the first active stop (the crew is already driving to or
working at it) and otherwise at the first stop in input order. From there the
closest unvisited stop is appended until every stop is placed. Equidistant
candidates are resolved by input order, so the same input always produces the
same tour.

Known limitation: greedy construction is not distance-optimal and can leave a
long final leg back across the service area. Routes only need to be sensible
for a human driver, so this is accepted rather than corrected here.
"""

from __future__ import annotations

from typing import Callable, Sequence

from ...models.domain import Coordinate, Stop
from ..geospatial import haversine_miles

DistanceFn = Callable[[Coordinate, Coordinate], float]


def _starting_index(stops: Sequence[Stop]) -> int:
    for index, stop in enumerate(stops):
        if stop.is_active:
            return index
    return 0


def build_tour(stops: Sequence[Stop], distance: DistanceFn = haversine_miles) -> list[Stop]:
    """Return ``stops`` reordered into a nearest-neighbour tour.

    Every stop must carry a coordinate. The input sequence is not modified and
    the result contains exactly the same stops.
    """
    if not stops:
        raise ValueError("At least one stop is required to build a tour.")
    missing = [stop.job_id for stop in stops if stop.coordinate is None]
    if missing:
        raise ValueError(f"Stops without coordinates cannot be toured: {', '.join(missing)}")

    start = _starting_index(stops)
    tour = [stops[start]]
    remaining = [stop for index, stop in enumerate(stops) if index != start]

    current = tour[0]
    while remaining:
        closest_index = 0
        closest_distance = distance(current.coordinate, remaining[0].coordinate)
        for index in range(1, len(remaining)):
            candidate_distance = distance(current.coordinate, remaining[index].coordinate)
            # Strictly smaller only: earlier candidates win ties.
            if candidate_distance < closest_distance:
                closest_distance = candidate_distance
                closest_index = index
        current = remaining.pop(closest_index)
        tour.append(current)

    return tour
