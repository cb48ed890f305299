"""
@file health_endpoints.py
@description Health check endpoint.
@dependencies fastapi
@consumers main.py
"""
import time
from fastapi import APIRouter, Depends

from cardreader.dependencies import get_settings_manager
from cardreader.response_models import HealthCheckResponse
from cardreader.settings_manager import SettingsManager, VERSION

router = APIRouter(
    prefix="/api",
    tags=["health"],
)


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(settings_manager: SettingsManager = Depends(get_settings_manager)):
    """Health check endpoint with standardized response."""
    start_time = time.time()
    version = settings_manager.get_setting("version", VERSION)
    latency_ms = round((time.time() - start_time) * 1000, 2)

    return HealthCheckResponse(
        status="healthy",
        version=version,
        latency_ms=latency_ms,
    )
