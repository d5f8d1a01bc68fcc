"""
Health check and system status endpoints.

Provides endpoints for:
- Basic health check
- Classifier readiness
- Liveness probe
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import Optional
import time

from app.core.config import get_settings
from app.core.dependencies import get_identification_service
from app.services.identification_service import IdentificationService

router = APIRouter(prefix="/health", tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    timestamp: float
    version: str


class DetailedHealthResponse(BaseModel):
    """Detailed health check with classifier status."""
    status: str
    timestamp: float
    version: str
    classifier: dict
    uptime_seconds: Optional[float] = None


# Track startup time
_startup_time: Optional[float] = None


def set_startup_time() -> None:
    """Set the startup time (called on app startup)."""
    global _startup_time
    _startup_time = time.time()


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns:
        Simple health status indicating the service is running.
    """
    return HealthResponse(
        status="healthy",
        timestamp=time.time(),
        version=get_settings().app_version
    )


@router.get("/ready", response_model=DetailedHealthResponse)
async def readiness_check(
    service: IdentificationService = Depends(get_identification_service),
) -> DetailedHealthResponse:
    """
    Readiness check for the identification classifier.

    Ready once the classifier has resolved into either ready state and the
    species catalog is non-empty. Fallback mode reports "degraded" but is
    still ready to serve.
    """
    classifier = service.get_status()

    if not service.is_loaded() or len(service.catalog) == 0:
        raise HTTPException(status_code=503, detail="Service not ready")

    uptime = None
    if _startup_time:
        uptime = time.time() - _startup_time

    return DetailedHealthResponse(
        status="degraded" if service.is_fallback() else "ready",
        timestamp=time.time(),
        version=get_settings().app_version,
        classifier=classifier,
        uptime_seconds=uptime
    )


@router.get("/live")
async def liveness_check() -> dict:
    """
    Simple liveness probe for Kubernetes.

    Returns 200 if the process is running.
    """
    return {"status": "alive"}
