"""Serializers for route plan outputs."""

from __future__ import annotations

import csv
import io
from dataclasses import asdict
from typing import Optional, Sequence

from ...models.domain import PlanningOutcome, PlanningWarning, RoutePlan, WarningKind


def format_distance(miles: float) -> str:
    return f"{miles:.1f}"


def warning_to_json(warning: PlanningWarning) -> dict:
    return {"kind": warning.kind.value, "job_id": warning.job_id, "message": warning.message}


def skipped_stops_banner(warnings: Sequence[PlanningWarning]) -> Optional[str]:
    skipped = sum(1 for warning in warnings if warning.kind is WarningKind.UNRESOLVED_STOP)
    if not skipped:
        return None
    return f"{skipped} stop(s) skipped: no location on file"


def route_plan_to_json(outcome: PlanningOutcome) -> dict:
    plan = outcome.plan
    return {
        "plan": {
            "stops": [asdict(stop) for stop in plan.stops],
            "total_distance_miles": plan.total_distance_miles,
            "total_drive_minutes": plan.total_drive_minutes,
            "total_work_minutes": plan.total_work_minutes,
            "map_url": plan.map_url,
        },
        "warnings": [warning_to_json(warning) for warning in outcome.warnings],
        "skipped_banner": skipped_stops_banner(outcome.warnings),
    }


def route_plan_to_csv(plan: RoutePlan) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "order",
        "job_id",
        "customer_name",
        "address",
        "miles_from_previous",
        "drive_minutes_from_previous",
        "work_minutes",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for stop in plan.stops:
        writer.writerow(
            {
                "order": stop.order,
                "job_id": stop.job_id,
                "customer_name": stop.customer_name,
                "address": stop.address,
                "miles_from_previous": format_distance(stop.distance_miles_from_previous),
                "drive_minutes_from_previous": stop.estimated_drive_minutes_from_previous,
                "work_minutes": round(stop.estimated_work_minutes),
            }
        )
    return buffer.getvalue()
