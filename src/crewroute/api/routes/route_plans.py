"""Route planning endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Response, status

from ...models.domain import PlanningOutcome
from ...schemas.routing import PlanningErrorResponse, RoutePlanRequest, RoutePlanResponse
from ...services.outputs.routing_formatter import route_plan_to_csv, route_plan_to_json
from ...services.routing.errors import PlanningError
from ...services.routing.geocoder import build_geocoder
from ...services.routing.service import PlanningOptions, plan_route

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/route-plans", tags=["route-plans"])

_ERROR_RESPONSES = {422: {"model": PlanningErrorResponse}}


def _plan(payload: RoutePlanRequest) -> PlanningOutcome:
    options = PlanningOptions(
        crew_id=payload.crew_id,
        day=payload.day,
        resolution_deadline_seconds=payload.resolution_deadline_seconds,
    )
    try:
        return plan_route(payload.job_records(), geocoder=build_geocoder(), options=options)
    except PlanningError:
        raise
    except Exception as exc:
        logger.exception(f"Error planning route: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to plan route: {str(exc)}",
        ) from exc


@router.post("", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK, responses=_ERROR_RESPONSES)
def create_route_plan(payload: RoutePlanRequest) -> RoutePlanResponse:
    outcome = _plan(payload)
    return RoutePlanResponse.model_validate(route_plan_to_json(outcome))


@router.post("/csv", status_code=status.HTTP_200_OK, responses=_ERROR_RESPONSES)
def create_route_plan_csv(payload: RoutePlanRequest) -> Response:
    """Plan the route and return it as a printable crew sheet."""
    outcome = _plan(payload)
    return Response(
        content=route_plan_to_csv(outcome.plan),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="route-plan.csv"'},
    )
