"""Health check endpoint."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> dict:
    settings = request.app.state.settings
    db_ready = getattr(request.app.state, "db_session_factory", None) is not None
    return {
        "success": True,
        "data": {
            "status": "healthy",
            "version": settings.app_version,
            "database": "configured" if db_ready else "unavailable",
            "proximityRadiusKm": settings.proximity_radius_km,
        },
        "requestId": request.state.request_id,
    }
