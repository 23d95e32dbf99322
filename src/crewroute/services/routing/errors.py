"""Fatal planning errors."""

from __future__ import annotations

from typing import Sequence

from ...models.domain import PlanningWarning


class PlanningError(Exception):
    """A planning request that cannot produce any route."""

    error_kind = "PlanningError"

    def __init__(self, message: str, warnings: Sequence[PlanningWarning] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.warnings = tuple(warnings)


class EmptyJobList(PlanningError):
    error_kind = "EmptyJobList"


class NoGeocodedStops(PlanningError):
    error_kind = "NoGeocodedStops"
