"""Domain models for job records and computed route plans."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


@dataclass(frozen=True, slots=True)
class Coordinate:
    """Geographic point in decimal degrees."""

    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        return (
            math.isfinite(self.latitude)
            and math.isfinite(self.longitude)
            and -90.0 <= self.latitude <= 90.0
            and -180.0 <= self.longitude <= 180.0
        )

    def as_text(self) -> str:
        return f"{self.latitude},{self.longitude}"


@dataclass(frozen=True, slots=True)
class JobRecord:
    """The job-management system's view of one job scheduled for a crew."""

    id: str
    customer_name: str
    status: str = "scheduled"
    assigned_crew_ids: tuple[str, ...] = ()
    scheduled_date: Optional[date] = None
    job_location: Optional[str] = None
    property_coordinate: Optional[Coordinate] = None
    property_address: Optional[str] = None
    client_billing_coordinate: Optional[Coordinate] = None
    client_billing_address: Optional[str] = None
    estimated_hours: Optional[float] = None


@dataclass(frozen=True, slots=True)
class Stop:
    """One job site for the day, as seen by the tour builder."""

    job_id: str
    customer_name: str
    address: str
    coordinate: Optional[Coordinate]
    is_active: bool = False
    estimated_work_minutes: float = 0.0


@dataclass(frozen=True, slots=True)
class RouteStop:
    order: int
    job_id: str
    customer_name: str
    address: str
    distance_miles_from_previous: float
    estimated_drive_minutes_from_previous: int
    estimated_work_minutes: float = 0.0


@dataclass(frozen=True, slots=True)
class RoutePlan:
    stops: tuple[RouteStop, ...]
    total_distance_miles: float
    total_drive_minutes: int
    map_url: Optional[str]
    total_work_minutes: float = 0.0


class WarningKind(str, Enum):
    UNRESOLVED_STOP = "UnresolvedStop"
    SPLIT_ROUTE_SUGGESTED = "SplitRouteSuggested"
    HIGH_DRIVE_TIME = "HighDriveTime"


@dataclass(frozen=True, slots=True)
class PlanningWarning:
    """Recoverable problem found while planning.

    ``job_id`` is ``None`` for warnings about the route as a whole.
    """

    kind: WarningKind
    job_id: Optional[str]
    message: str


@dataclass(frozen=True, slots=True)
class PlanningOutcome:
    plan: RoutePlan
    warnings: tuple[PlanningWarning, ...] = field(default_factory=tuple)

    def unresolved_job_ids(self) -> list[str]:
        return [
            warning.job_id
            for warning in self.warnings
            if warning.kind is WarningKind.UNRESOLVED_STOP and warning.job_id is not None
        ]
