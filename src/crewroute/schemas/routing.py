"""Route planning request/response schemas."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from ..models.domain import Coordinate, JobRecord


class CoordinateModel(BaseModel):
    # Ranges are checked during stop resolution so one bad record only skips that job.
    latitude: float = Field(..., validation_alias=AliasChoices("latitude", "lat"))
    longitude: float = Field(..., validation_alias=AliasChoices("longitude", "lon", "lng"))

    def to_domain(self) -> Coordinate:
        return Coordinate(latitude=self.latitude, longitude=self.longitude)


class JobRecordModel(BaseModel):
    id: str = Field(..., min_length=1)
    customer_name: str = ""
    status: str = "scheduled"
    assigned_crew_ids: List[str] = Field(default_factory=list)
    assigned_crew_id: Optional[str] = None
    scheduled_date: Optional[date] = None
    job_location: Optional[str] = None
    property_coordinate: Optional[CoordinateModel] = None
    property_address: Optional[str] = None
    client_billing_coordinate: Optional[CoordinateModel] = None
    client_billing_address: Optional[str] = None
    estimated_hours: Optional[float] = Field(default=None, ge=0)

    def to_domain(self) -> JobRecord:
        crew_ids = list(self.assigned_crew_ids)
        if self.assigned_crew_id and self.assigned_crew_id not in crew_ids:
            crew_ids.append(self.assigned_crew_id)
        return JobRecord(
            id=self.id,
            customer_name=self.customer_name,
            status=self.status,
            assigned_crew_ids=tuple(crew_ids),
            scheduled_date=self.scheduled_date,
            job_location=self.job_location,
            property_coordinate=self.property_coordinate.to_domain() if self.property_coordinate else None,
            property_address=self.property_address,
            client_billing_coordinate=(
                self.client_billing_coordinate.to_domain() if self.client_billing_coordinate else None
            ),
            client_billing_address=self.client_billing_address,
            estimated_hours=self.estimated_hours,
        )


class RoutePlanRequest(BaseModel):
    jobs: List[JobRecordModel] = Field(default_factory=list)
    crew_id: Optional[str] = Field(default=None, description="When set together with date, only that crew's open jobs are planned.")
    day: Optional[date] = Field(default=None, validation_alias=AliasChoices("date", "day"))
    resolution_deadline_seconds: Optional[float] = Field(default=None, gt=0)

    @field_validator("jobs")
    @classmethod
    def _unique_job_ids(cls, jobs: List[JobRecordModel]) -> List[JobRecordModel]:
        seen: set[str] = set()
        duplicates: list[str] = []
        for job in jobs:
            if job.id in seen and job.id not in duplicates:
                duplicates.append(job.id)
            seen.add(job.id)
        if duplicates:
            raise ValueError(f"Duplicate job ids: {', '.join(duplicates)}")
        return jobs

    def job_records(self) -> list[JobRecord]:
        return [job.to_domain() for job in self.jobs]


class RouteStopModel(BaseModel):
    order: int = Field(..., ge=1)
    job_id: str
    customer_name: str
    address: str
    distance_miles_from_previous: float = Field(..., ge=0)
    estimated_drive_minutes_from_previous: int = Field(..., ge=0)
    estimated_work_minutes: float


class RoutePlanModel(BaseModel):
    stops: List[RouteStopModel]
    total_distance_miles: float
    total_drive_minutes: int
    total_work_minutes: float
    map_url: Optional[str]


class PlanningWarningModel(BaseModel):
    kind: str
    job_id: Optional[str]
    message: str


class RoutePlanResponse(BaseModel):
    plan: RoutePlanModel
    warnings: List[PlanningWarningModel]
    skipped_banner: Optional[str] = None


class PlanningErrorResponse(BaseModel):
    error_kind: str
    message: str
    warnings: List[PlanningWarningModel] = Field(default_factory=list)
