import time
from datetime import date
from typing import Optional

import httpx

from crewroute.models.domain import Coordinate, JobRecord, WarningKind
from crewroute.services.routing.geocoder import NominatimGeocoder
from crewroute.services.routing.resolver import (
    display_address,
    is_active_status,
    resolve_stops,
    select_jobs_for_day,
)

TODAY = date(2026, 10, 18)


def _job(
    job_id: str,
    coordinate: Optional[Coordinate] = None,
    *,
    status: str = "scheduled",
    billing: Optional[Coordinate] = None,
    property_address: Optional[str] = None,
    billing_address: Optional[str] = None,
    job_location: Optional[str] = None,
    crew: str = "crew-1",
    day: date = TODAY,
    hours: Optional[float] = None,
) -> JobRecord:
    return JobRecord(
        id=job_id,
        customer_name=f"Customer {job_id}",
        status=status,
        assigned_crew_ids=(crew,),
        scheduled_date=day,
        job_location=job_location,
        property_coordinate=coordinate,
        property_address=property_address,
        client_billing_coordinate=billing,
        client_billing_address=billing_address,
        estimated_hours=hours,
    )


class FakeGeocoder:
    def __init__(self, answers=None, on_lookup=None, error=None):
        self.answers = answers or {}
        self.on_lookup = on_lookup
        self.error = error
        self.calls = []
        self.timeouts = []

    def geocode(self, address, timeout=None):
        self.calls.append(address)
        self.timeouts.append(timeout)
        if self.on_lookup is not None:
            self.on_lookup()
        if self.error is not None:
            raise self.error
        return self.answers.get(address)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_property_coordinate_takes_precedence_over_billing():
    job = _job("J1", Coordinate(40.0, -75.0), billing=Coordinate(41.0, -76.0))

    resolution = resolve_stops([job])

    assert resolution.resolved[0].coordinate == Coordinate(40.0, -75.0)
    assert resolution.warnings == []


def test_billing_coordinate_used_when_property_missing():
    job = _job("J1", billing=Coordinate(41.0, -76.0), billing_address="9 Billing Rd")

    resolution = resolve_stops([job])

    assert resolution.resolved[0].coordinate == Coordinate(41.0, -76.0)
    assert resolution.resolved[0].address == "9 Billing Rd"


def test_job_without_location_becomes_unresolved_warning():
    jobs = [_job("J1", Coordinate(40.0, -75.0)), _job("J2"), _job("J3", Coordinate(40.1, -75.0))]

    resolution = resolve_stops(jobs)

    assert [stop.job_id for stop in resolution.resolved] == ["J1", "J3"]
    assert len(resolution.warnings) == 1
    warning = resolution.warnings[0]
    assert warning.kind is WarningKind.UNRESOLVED_STOP
    assert warning.job_id == "J2"


def test_out_of_range_coordinate_is_treated_as_unresolved():
    job = _job("J1", Coordinate(123.0, -75.0))

    resolution = resolve_stops([job])

    assert resolution.resolved == []
    assert resolution.warnings[0].kind is WarningKind.UNRESOLVED_STOP
    assert "out-of-range" in resolution.warnings[0].message


def test_out_of_range_property_falls_back_to_billing():
    job = _job("J1", Coordinate(40.0, -275.0), billing=Coordinate(41.0, -76.0))

    resolution = resolve_stops([job])

    assert resolution.resolved[0].coordinate == Coordinate(41.0, -76.0)


def test_active_status_sets_flag():
    jobs = [_job("J1", Coordinate(40.0, -75.0)), _job("J2", Coordinate(40.1, -75.0), status="On_Site")]

    resolution = resolve_stops(jobs)

    assert [stop.is_active for stop in resolution.resolved] == [False, True]


def test_work_minutes_from_estimated_hours_with_default():
    jobs = [_job("J1", Coordinate(40.0, -75.0), hours=1.5), _job("J2", Coordinate(40.1, -75.0))]

    resolution = resolve_stops(jobs, default_job_hours=2.5)

    assert [stop.estimated_work_minutes for stop in resolution.resolved] == [90.0, 150.0]


def test_geocoder_resolves_address_only_jobs_once_per_address():
    geocoder = FakeGeocoder({"12 Elm St": Coordinate(40.2, -75.1)})
    jobs = [_job("J1", property_address="12 Elm St"), _job("J2", property_address="12 elm st ")]

    resolution = resolve_stops(jobs, geocoder=geocoder)

    assert [stop.coordinate for stop in resolution.resolved] == [Coordinate(40.2, -75.1)] * 2
    assert geocoder.calls == ["12 Elm St"]


def test_geocoder_tries_billing_address_after_property_address():
    geocoder = FakeGeocoder({"9 Billing Rd": Coordinate(41.0, -76.0)})
    job = _job("J1", property_address="Unknown Place", billing_address="9 Billing Rd")

    resolution = resolve_stops([job], geocoder=geocoder)

    assert resolution.resolved[0].coordinate == Coordinate(41.0, -76.0)
    assert geocoder.calls == ["Unknown Place", "9 Billing Rd"]


def test_geocoder_failure_is_recoverable():
    geocoder = FakeGeocoder(error=httpx.ConnectError("refused"))
    jobs = [_job("J1", property_address="12 Elm St"), _job("J2", Coordinate(40.0, -75.0))]

    resolution = resolve_stops(jobs, geocoder=geocoder)

    assert [stop.job_id for stop in resolution.resolved] == ["J2"]
    assert [warning.job_id for warning in resolution.warnings] == ["J1"]
    assert "Address lookup failed" in resolution.warnings[0].message
    assert "refused" in resolution.warnings[0].message


def test_lookup_deadline_skips_remaining_lookups_but_keeps_known_coordinates():
    clock = FakeClock()

    def slow_lookup():
        clock.now += 2.0

    geocoder = FakeGeocoder(
        {"1 First St": Coordinate(40.0, -75.0), "2 Second St": Coordinate(40.1, -75.0)},
        on_lookup=slow_lookup,
    )
    jobs = [
        _job("J1", property_address="1 First St"),
        _job("J2", property_address="2 Second St"),
        _job("J3", Coordinate(40.2, -75.0)),
    ]

    resolution = resolve_stops(jobs, geocoder=geocoder, deadline_seconds=1.0, clock=clock)

    assert [stop.job_id for stop in resolution.resolved] == ["J1", "J3"]
    assert resolution.warnings[0].job_id == "J2"
    assert "deadline" in resolution.warnings[0].message
    assert geocoder.calls == ["1 First St"]
    assert geocoder.timeouts == [1.0]


def test_display_address_preference():
    coordinate = Coordinate(40.0, -75.0)

    assert display_address(_job("J", job_location="Back lot", property_address="P", billing_address="B")) == "Back lot"
    assert display_address(_job("J", property_address="P", billing_address="B")) == "P"
    assert display_address(_job("J", billing_address="B")) == "B"
    assert display_address(_job("J"), coordinate) == "40.0,-75.0"
    assert display_address(_job("J")) == ""


def test_is_active_status_is_case_insensitive():
    assert is_active_status("EN_ROUTE")
    assert not is_active_status("scheduled")
    assert is_active_status("driving", active_statuses=("driving",))


def test_select_jobs_for_day_filters_crew_date_and_closed_statuses():
    jobs = [
        _job("J1"),
        _job("J2", crew="crew-2"),
        _job("J3", day=date(2026, 10, 19)),
        _job("J4", status="completed"),
        _job("J5", status="Cancelled"),
        _job("J6", status="in_progress"),
    ]

    selected = select_jobs_for_day(jobs, "crew-1", TODAY)

    assert [job.id for job in selected] == ["J1", "J6"]


def test_slow_geocoder_retries_stay_within_lookup_deadline():
    calls = []

    def slow_unreachable(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        time.sleep(0.05)
        raise httpx.ConnectTimeout("timed out", request=request)

    geocoder = NominatimGeocoder(
        base_url="https://geo.example.com",
        max_retries=10,
        backoff_seconds=0.0,
        transport=httpx.MockTransport(slow_unreachable),
    )
    jobs = [_job("J1", property_address="12 Elm St"), _job("J2", Coordinate(40.0, -75.0))]

    started = time.monotonic()
    resolution = resolve_stops(jobs, geocoder=geocoder, deadline_seconds=0.12)
    elapsed = time.monotonic() - started

    assert elapsed < 0.3
    assert len(calls) < 11
    assert [stop.job_id for stop in resolution.resolved] == ["J2"]
    assert resolution.warnings[0].job_id == "J1"
    assert "Address lookup failed" in resolution.warnings[0].message
