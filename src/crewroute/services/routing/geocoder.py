"""HTTP client for a Nominatim-compatible geocoding service."""

from __future__ import annotations

import logging
import time
from typing import Optional, Protocol

import httpx

from ...config import settings
from ...models.domain import Coordinate
from ..geospatial import is_valid_coordinate

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    def geocode(self, address: str, timeout: float | None = None) -> Optional[Coordinate]:
        ...


class NominatimGeocoder:
    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        country_codes: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.geocoder_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("Geocoder base URL is not configured.")
        self.user_agent = user_agent or settings.geocoder_user_agent
        self.timeout = timeout if timeout is not None else settings.geocoder_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.geocoder_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.geocoder_backoff_seconds
        self.country_codes = country_codes or settings.geocoder_country_codes
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=min(self.timeout, 5.0)),
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
        )

    def _request_timeout(self, expires_at: Optional[float]) -> httpx.Timeout:
        limit = self.timeout
        if expires_at is not None:
            limit = min(limit, expires_at - time.monotonic())
        return httpx.Timeout(limit, connect=min(limit, 5.0))

    def _wait_before_retry(self, wait_time: float, expires_at: Optional[float], address: str) -> None:
        if expires_at is not None and time.monotonic() + wait_time >= expires_at:
            raise TimeoutError(f"Geocoder lookup for '{address}' ran out of time")
        time.sleep(wait_time)

    def geocode(self, address: str, timeout: float | None = None) -> Optional[Coordinate]:
        """Resolve a free-text address to a coordinate, or None if nothing matched.

        ``timeout`` bounds the whole lookup, retries and back-off included.
        Exhausting it raises ``TimeoutError``.
        """
        if not address or not address.strip():
            return None

        params = {"q": address.strip(), "format": "json", "limit": 1}
        if self.country_codes:
            params["countrycodes"] = self.country_codes
        url = f"{self.base_url}/search"
        expires_at = time.monotonic() + timeout if timeout is not None else None

        client = self._get_client()
        try:
            attempt = 0
            while True:
                if expires_at is not None and time.monotonic() >= expires_at:
                    raise TimeoutError(f"Geocoder lookup for '{address}' ran out of time")
                try:
                    response = client.get(url, params=params, timeout=self._request_timeout(expires_at))
                    response.raise_for_status()
                    return _parse_search_response(response.json(), address)
                except httpx.HTTPStatusError as exc:
                    # Client errors will not improve on retry.
                    if exc.response.status_code < 500 and exc.response.status_code != 429:
                        raise
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    self._wait_before_retry(self.backoff_seconds * attempt, expires_at, address)
                except (httpx.TimeoutException, httpx.NetworkError) as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Failed to reach geocoder at {self.base_url}: {exc}"
                        ) from exc
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(
                        f"Geocoder network error, retrying in {wait_time:.1f}s "
                        f"(attempt {attempt}/{self.max_retries}): {exc}"
                    )
                    self._wait_before_retry(wait_time, expires_at, address)
        finally:
            client.close()


def _parse_search_response(payload: object, address: str) -> Optional[Coordinate]:
    if not isinstance(payload, list) or not payload:
        logger.info(f"Geocoder found no match for '{address}'")
        return None
    first = payload[0]
    try:
        lat = float(first["lat"])
        lon = float(first["lon"])
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Geocoder returned a malformed result for '{address}'") from exc
    if not is_valid_coordinate(lat, lon):
        logger.warning(f"Geocoder returned out-of-range coordinate {lat},{lon} for '{address}'")
        return None
    return Coordinate(latitude=lat, longitude=lon)


def build_geocoder() -> Optional[Geocoder]:
    """Return the configured geocoder, or None when geocoding is disabled."""
    if not settings.geocoder_base_url:
        return None
    return NominatimGeocoder()


def check_health(base_url: str | None = None) -> bool:
    """Check geocoder reachability with a lightweight status request."""
    base = base_url or settings.geocoder_base_url
    if not base:
        return False
    try:
        response = httpx.get(
            f"{base.rstrip('/')}/status",
            params={"format": "json"},
            headers={"User-Agent": settings.geocoder_user_agent},
            timeout=5.0,
        )
        response.raise_for_status()
        return True
    except httpx.HTTPError:
        return False
