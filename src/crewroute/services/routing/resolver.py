"""Turn job records into plannable stops."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Iterable, Optional, Sequence

import httpx

from ...config import settings
from ...models.domain import Coordinate, JobRecord, PlanningWarning, Stop, WarningKind
from .geocoder import Geocoder

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StopResolution:
    resolved: list[Stop] = field(default_factory=list)
    warnings: list[PlanningWarning] = field(default_factory=list)


def select_jobs_for_day(
    jobs: Iterable[JobRecord],
    crew_id: str,
    day: date,
    closed_statuses: Sequence[str] | None = None,
) -> list[JobRecord]:
    """Keep jobs scheduled on ``day`` for ``crew_id`` that are still open, in input order."""
    closed = {status.lower() for status in (closed_statuses or settings.closed_job_statuses)}
    return [
        job
        for job in jobs
        if job.scheduled_date == day
        and crew_id in job.assigned_crew_ids
        and job.status.lower() not in closed
    ]


def display_address(job: JobRecord, coordinate: Optional[Coordinate] = None) -> str:
    for candidate in (job.job_location, job.property_address, job.client_billing_address):
        if candidate and candidate.strip():
            return candidate.strip()
    if coordinate is not None:
        return coordinate.as_text()
    return ""


def is_active_status(status: str, active_statuses: Sequence[str] | None = None) -> bool:
    active = active_statuses or settings.active_job_statuses
    return status.lower() in {item.lower() for item in active}


class _LookupBudget:
    """Shared deadline and per-request memo for address lookups."""

    def __init__(
        self,
        geocoder: Optional[Geocoder],
        deadline_seconds: float,
        clock: Callable[[], float],
    ) -> None:
        self.geocoder = geocoder
        self.clock = clock
        self.expires_at = clock() + deadline_seconds
        self.cache: dict[str, Optional[Coordinate]] = {}

    def remaining(self) -> float:
        return self.expires_at - self.clock()

    def expired(self) -> bool:
        return self.remaining() <= 0

    def lookup(self, address: str) -> Optional[Coordinate]:
        key = address.strip().lower()
        if key in self.cache:
            return self.cache[key]
        coordinate = self.geocoder.geocode(address, timeout=self.remaining())
        self.cache[key] = coordinate
        return coordinate


def _unresolved(job: JobRecord, message: str) -> PlanningWarning:
    return PlanningWarning(kind=WarningKind.UNRESOLVED_STOP, job_id=job.id, message=message)


def _resolve_coordinate(job: JobRecord, budget: _LookupBudget) -> tuple[Optional[Coordinate], Optional[str]]:
    """Return (coordinate, failure message)."""
    invalid: list[Coordinate] = []
    for candidate in (job.property_coordinate, job.client_billing_coordinate):
        if candidate is None:
            continue
        if candidate.is_valid():
            return candidate, None
        invalid.append(candidate)

    addresses = [
        address.strip()
        for address in (job.property_address, job.job_location, job.client_billing_address)
        if address and address.strip()
    ]
    lookup_error: Optional[str] = None
    if budget.geocoder is not None and addresses:
        for address in dict.fromkeys(addresses):
            if budget.expired():
                return None, f"Address lookup deadline exceeded before job {job.id} could be located"
            try:
                coordinate = budget.lookup(address)
            except (httpx.HTTPError, ConnectionError, TimeoutError, ValueError) as exc:
                logger.warning(f"Geocoding failed for job {job.id} ('{address}'): {exc}")
                lookup_error = str(exc)
                continue
            if coordinate is not None and coordinate.is_valid():
                return coordinate, None

    if invalid:
        return None, f"Job {job.id} has an out-of-range coordinate ({invalid[0].as_text()})"
    if lookup_error is not None:
        return None, f"Address lookup failed for job {job.id}: {lookup_error}"
    return None, f"No location on file for job {job.id}"


def resolve_stops(
    jobs: Sequence[JobRecord],
    *,
    geocoder: Optional[Geocoder] = None,
    deadline_seconds: float | None = None,
    active_statuses: Sequence[str] | None = None,
    default_job_hours: float | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> StopResolution:
    """Partition jobs into resolvable stops and per-job warnings, preserving input order."""
    budget = _LookupBudget(
        geocoder,
        deadline_seconds if deadline_seconds is not None else settings.resolution_deadline_seconds,
        clock,
    )
    hours_default = default_job_hours if default_job_hours is not None else settings.default_job_hours
    resolution = StopResolution()

    for job in jobs:
        coordinate, failure = _resolve_coordinate(job, budget)
        if coordinate is None:
            logger.warning(failure)
            resolution.warnings.append(_unresolved(job, failure))
            continue
        hours = job.estimated_hours if job.estimated_hours is not None else hours_default
        resolution.resolved.append(
            Stop(
                job_id=job.id,
                customer_name=job.customer_name,
                address=display_address(job, coordinate),
                coordinate=coordinate,
                is_active=is_active_status(job.status, active_statuses),
                estimated_work_minutes=hours * 60,
            )
        )

    return resolution
