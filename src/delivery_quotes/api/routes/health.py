"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_directions_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.directions_client import check_health as directions_health_check
    return directions_health_check


@router.get("/health/routing", status_code=status.HTTP_200_OK)
def health_routing() -> dict:
    """Check the Mapbox directions service. Quotes still work when it is down."""
    if not settings.mapbox_access_token:
        return {"service": "mapbox", "configured": False, "healthy": False, "fallback": "haversine"}
    try:
        healthy = _get_directions_health_check()()
        return {"service": "mapbox", "configured": True, "healthy": healthy}
    except Exception as e:
        return {"service": "mapbox", "configured": True, "healthy": False, "error": str(e)}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection and quote table status."""
    from ...db.supabase import get_supabase_client
    from ...persistence.quotes import QUOTES_TABLE

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set DQ_SUPABASE_URL and DQ_SUPABASE_KEY environment variables. Using in-memory storage.",
        }

    try:
        supabase.table(QUOTES_TABLE).select("id").limit(1).execute()
        return {
            "configured": True,
            "connected": True,
            "message": "Database connected.",
        }
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
