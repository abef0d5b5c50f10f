"""
Health check endpoint - no authentication required
"""

from fastapi import APIRouter, Request

from ..config import API_VERSION

router = APIRouter()


@router.get("/healthz", include_in_schema=False)
async def healthz(request: Request):
    settings = request.app.state.settings
    return {
        "status": "ok",
        "version": API_VERSION,
        "ingest_enabled": settings.enabled,
    }
