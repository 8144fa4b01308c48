"""
Health check endpoints with dependency monitoring

Provides two endpoints:
- GET /api/health - Basic health check
- GET /api/health/dependencies - Ticket store, Gemini API and Nominatim status
"""
import asyncio
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

import httpx
from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from civicai import __version__
from civicai.config import get_settings
from civicai.utils.logger import get_logger

settings = get_settings()
logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

# Application start time for uptime calculation
APP_START_TIME = time.time()


# ============================================================================
# Pydantic Models
# ============================================================================

class HealthResponse(BaseModel):
    """Basic health check response"""
    status: str = Field(..., description="Overall status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Check timestamp")
    version: str = Field(..., description="Application version")
    uptime_seconds: float = Field(..., description="Application uptime in seconds")


class DependencyStatus(BaseModel):
    """Status of a single dependency"""
    name: str = Field(..., description="Dependency name")
    status: str = Field(..., description="Status: healthy, degraded, unhealthy")
    latency_ms: Optional[float] = Field(None, description="Response latency in milliseconds")
    error_message: Optional[str] = Field(None, description="Error message if unhealthy")


class DependencyHealth(BaseModel):
    """Dependency health check response"""
    overall_status: str = Field(..., description="Overall status: healthy, degraded, unhealthy")
    dependencies: Dict[str, DependencyStatus] = Field(..., description="Individual dependency statuses")
    checked_at: datetime = Field(default_factory=datetime.utcnow, description="Check timestamp")


# ============================================================================
# Dependency Check Functions
# ============================================================================

def check_ticket_store() -> DependencyStatus:
    """
    Check that the ticket store directory is writable
    """
    directory = Path(settings.ticket_store_path).resolve().parent
    probe = directory if directory.exists() else directory.parent
    if probe.exists() and probe.is_dir():
        return DependencyStatus(name="ticket_store", status="healthy")
    return DependencyStatus(
        name="ticket_store",
        status="unhealthy",
        error_message=f"Directory {directory} is not available"
    )


async def check_http_dependency(name: str, url: str, **kwargs) -> DependencyStatus:
    """
    GET a URL and report latency

    Returns:
        DependencyStatus with health information
    """
    try:
        start = time.time()
        async with httpx.AsyncClient(timeout=5.0) as client:
            response = await client.get(url, **kwargs)
            response.raise_for_status()
        latency = (time.time() - start) * 1000

        return DependencyStatus(name=name, status="healthy", latency_ms=round(latency, 2))

    except httpx.TimeoutException:
        logger.error(f"{name} health check timed out")
        return DependencyStatus(
            name=name,
            status="unhealthy",
            error_message="Request timed out after 5 seconds"
        )
    except httpx.HTTPStatusError as e:
        logger.error(f"{name} health check failed: {e}")
        return DependencyStatus(
            name=name,
            status="unhealthy",
            error_message=f"HTTP {e.response.status_code}: {str(e)}"
        )
    except httpx.HTTPError as e:
        logger.error(f"{name} health check failed: {e}")
        return DependencyStatus(name=name, status="unhealthy", error_message=str(e))


async def check_google_api() -> DependencyStatus:
    """
    Check Google Gemini API connectivity
    """
    if not settings.google_api_key:
        return DependencyStatus(
            name="google_api",
            status="degraded",
            error_message="API key not configured"
        )
    return await check_http_dependency(
        "google_api",
        "https://generativelanguage.googleapis.com/v1/models",
        params={"key": settings.google_api_key}
    )


async def check_nominatim() -> DependencyStatus:
    """
    Check Nominatim geocoding connectivity
    """
    return await check_http_dependency(
        "nominatim",
        f"{settings.nominatim_url.rstrip('/')}/status",
        params={"format": "json"},
        headers={"User-Agent": settings.geocoding_user_agent}
    )


def determine_overall_status(dependencies: Dict[str, DependencyStatus]) -> str:
    """
    Determine overall system status

    Rules:
    - Ticket store unhealthy → "unhealthy" (nothing works without it)
    - Any other dependency degraded/unhealthy → "degraded"
      (detection falls back, geocoding falls back to coordinates)
    - All healthy → "healthy"
    """
    store = dependencies.get("ticket_store")
    if store and store.status == "unhealthy":
        return "unhealthy"

    if any(dep.status in ("degraded", "unhealthy") for dep in dependencies.values()):
        return "degraded"

    return "healthy"


# ============================================================================
# API Endpoints
# ============================================================================

@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check"
)
async def basic_health_check() -> HealthResponse:
    """
    Basic health check endpoint, no external calls
    """
    uptime = time.time() - APP_START_TIME

    return HealthResponse(
        status="healthy",
        timestamp=datetime.utcnow(),
        version=__version__,
        uptime_seconds=round(uptime, 2)
    )


@router.get(
    "/dependencies",
    response_model=DependencyHealth,
    status_code=status.HTTP_200_OK,
    summary="Dependency health check"
)
async def dependency_health_check() -> DependencyHealth:
    """
    Check ticket store, Gemini API and Nominatim

    Always returns 200 OK with detailed status information.
    """
    logger.info("Performing dependency health checks")
    google, nominatim = await asyncio.gather(check_google_api(), check_nominatim())
    dependencies = {
        "ticket_store": check_ticket_store(),
        "google_api": google,
        "nominatim": nominatim,
    }

    unhealthy_deps = [name for name, dep in dependencies.items() if dep.status == "unhealthy"]
    if unhealthy_deps:
        logger.warning(f"Unhealthy dependencies: {', '.join(unhealthy_deps)}")

    return DependencyHealth(
        overall_status=determine_overall_status(dependencies),
        dependencies=dependencies,
        checked_at=datetime.utcnow()
    )
