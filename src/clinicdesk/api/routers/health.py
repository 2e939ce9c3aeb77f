"""
Health check endpoints.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request, status
from pydantic import BaseModel

from ...core.exceptions import StoreError
from ..deps import KeyValueStoreDep, SettingsDep
from ..schemas.common import ApiResponse
from ..utils.responses import fail, ok

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    timestamp: datetime
    version: str
    service: str


@router.get("", response_model=ApiResponse[HealthResponse])
@router.get("/", response_model=ApiResponse[HealthResponse], include_in_schema=False)
async def health_check(request: Request, settings: SettingsDep):
    """
    Health check endpoint.

    Returns the current status of the service without touching the store.
    """
    return ok(request, data=HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=settings.app_version,
        service=settings.app_name,
    ), message="OK")


@router.get("/ready", response_model=ApiResponse[dict])
async def readiness_check(request: Request, store: KeyValueStoreDep):
    """
    Readiness check endpoint.

    Pings the key-value store; returns 503 while it is unreachable.
    """
    try:
        await store.ping()
    except StoreError as e:
        return fail(
            request,
            error="NOT_READY",
            message="Key-value store is unreachable",
            details={"store": e.message},
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return ok(request, data={"ready": True, "checks": {"store": "ok"}}, message="Ready")
