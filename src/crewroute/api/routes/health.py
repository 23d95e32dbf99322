"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_geocoder_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.geocoder import check_health as geocoder_health_check
    return geocoder_health_check


@router.get("/health/geocoder", status_code=status.HTTP_200_OK)
def health_geocoder() -> dict:
    """Check geocoding service health."""
    if not settings.geocoder_base_url:
        return {
            "service": "geocoder",
            "configured": False,
            "healthy": False,
            "message": "Geocoding disabled. Set CREWROUTE_GEOCODER_BASE_URL to enable address lookups.",
        }
    try:
        geocoder_health_check = _get_geocoder_health_check()
        return {"service": "geocoder", "configured": True, "healthy": geocoder_health_check()}
    except Exception as e:
        return {"service": "geocoder", "configured": True, "healthy": False, "error": str(e)}
