"""Route planning orchestration service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence

from ...config import Settings, settings as default_settings
from ...models.domain import (
    JobRecord,
    PlanningOutcome,
    PlanningWarning,
    RoutePlan,
    RouteStop,
    Stop,
    WarningKind,
)
from ..geospatial import haversine_miles
from .drive_time import estimate_minutes
from .errors import EmptyJobList, NoGeocodedStops
from .geocoder import Geocoder
from .map_link import compose_map_url
from .resolver import resolve_stops, select_jobs_for_day
from .tour import build_tour

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PlanningOptions:
    crew_id: Optional[str] = None
    day: Optional[date] = None
    resolution_deadline_seconds: Optional[float] = None


def _route_stops(tour: Sequence[Stop], config: Settings) -> list[RouteStop]:
    route_stops: list[RouteStop] = []
    previous: Optional[Stop] = None
    for order, stop in enumerate(tour, start=1):
        if previous is None:
            distance = 0.0
            minutes = 0
        else:
            distance = haversine_miles(previous.coordinate, stop.coordinate, config.earth_radius_miles)
            minutes = estimate_minutes(distance, config.average_speed_mph, config.minimum_drive_minutes)
        route_stops.append(
            RouteStop(
                order=order,
                job_id=stop.job_id,
                customer_name=stop.customer_name,
                address=stop.address,
                distance_miles_from_previous=distance,
                estimated_drive_minutes_from_previous=minutes,
                estimated_work_minutes=stop.estimated_work_minutes,
            )
        )
        previous = stop
    return route_stops


def _advisory_warnings(plan: RoutePlan, config: Settings) -> list[PlanningWarning]:
    warnings: list[PlanningWarning] = []
    if len(plan.stops) > config.split_route_stop_threshold:
        warnings.append(
            PlanningWarning(
                kind=WarningKind.SPLIT_ROUTE_SUGGESTED,
                job_id=None,
                message="Consider splitting this route across multiple crews",
            )
        )
    if plan.total_drive_minutes > config.high_drive_time_minutes:
        warnings.append(
            PlanningWarning(
                kind=WarningKind.HIGH_DRIVE_TIME,
                job_id=None,
                message=f"High drive time ({plan.total_drive_minutes} min) - review job locations",
            )
        )
    return warnings


def assemble_plan(tour: Sequence[Stop], config: Settings | None = None) -> RoutePlan:
    """Compute per-leg figures for an ordered tour; totals are sums of the legs."""
    config = config or default_settings
    stops = _route_stops(tour, config)
    total_distance = 0.0
    total_minutes = 0
    total_work = 0.0
    for stop in stops:
        total_distance += stop.distance_miles_from_previous
        total_minutes += stop.estimated_drive_minutes_from_previous
        total_work += stop.estimated_work_minutes
    map_url = compose_map_url(
        [stop.address for stop in stops],
        base_url=config.maps_base_url,
        travel_mode=config.maps_travel_mode,
        waypoint_separator=config.maps_waypoint_separator,
    )
    return RoutePlan(
        stops=tuple(stops),
        total_distance_miles=total_distance,
        total_drive_minutes=total_minutes,
        map_url=map_url,
        total_work_minutes=total_work,
    )


def plan_route(
    jobs: Sequence[JobRecord],
    *,
    geocoder: Optional[Geocoder] = None,
    options: PlanningOptions | None = None,
    config: Settings | None = None,
) -> PlanningOutcome:
    """Plan today's visiting order for one crew.

    Raises ``EmptyJobList`` when there is nothing to plan and
    ``NoGeocodedStops`` when no job could be placed on the map. Jobs without a
    usable location are skipped and reported as warnings.
    """
    config = config or default_settings
    options = options or PlanningOptions()

    selected = list(jobs)
    if options.crew_id is not None and options.day is not None:
        selected = select_jobs_for_day(selected, options.crew_id, options.day, config.closed_job_statuses)
    if not selected:
        raise EmptyJobList("No jobs were supplied for route planning.")

    resolution = resolve_stops(
        selected,
        geocoder=geocoder,
        deadline_seconds=options.resolution_deadline_seconds or config.resolution_deadline_seconds,
        active_statuses=config.active_job_statuses,
        default_job_hours=config.default_job_hours,
    )
    if not resolution.resolved:
        raise NoGeocodedStops(
            "None of the jobs for today have location coordinates available.",
            warnings=resolution.warnings,
        )

    tour = build_tour(resolution.resolved, distance=lambda a, b: haversine_miles(a, b, config.earth_radius_miles))
    plan = assemble_plan(tour, config)
    warnings = [*resolution.warnings, *_advisory_warnings(plan, config)]

    logger.info(
        f"Planned route with {len(plan.stops)} stops ({len(resolution.warnings)} skipped), "
        f"{plan.total_distance_miles:.1f} mi, {plan.total_drive_minutes} min driving"
    )
    return PlanningOutcome(plan=plan, warnings=tuple(warnings))
