"""Health check endpoints."""

from datetime import UTC, datetime

from fastapi import APIRouter, Response, status
from pydantic import BaseModel, Field

from src.api.dependencies import FactoryDep, SettingsDep
from src.commons.telemetry import get_logger

router = APIRouter()
logger = get_logger(__name__)


class HealthResponse(BaseModel):
    """Liveness response."""

    status: str = Field(default="ok", description="Always 'ok' while serving")
    timestamp: str = Field(description="Current server time, ISO-8601 UTC")


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool = Field(description="Whether the service is ready to accept uploads")
    checks: dict[str, bool] = Field(
        default_factory=dict,
        description="Individual readiness checks",
    )
    version: str = Field(description="Application version")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Report that the process is up. Touches no dependencies.",
)
async def health_check() -> HealthResponse:
    """Simple liveness check - just verifies the app is running."""
    timestamp = datetime.now(UTC).isoformat(timespec="milliseconds")
    return HealthResponse(status="ok", timestamp=timestamp.replace("+00:00", "Z"))


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Check blob storage connectivity and the FFmpeg binary.",
    responses={503: {"model": ReadinessResponse}},
)
async def readiness(
    response: Response,
    settings: SettingsDep,
    factory: FactoryDep,
) -> ReadinessResponse:
    """Check if service is ready to accept uploads."""
    checks: dict[str, bool] = {}

    try:
        health = await factory.get_blob_storage().health_check()
        checks["blob_storage"] = health.healthy
    except Exception as e:
        logger.warning("Blob storage readiness check failed", extra={"error": str(e)})
        checks["blob_storage"] = False

    checks["transcoder"] = factory.get_transcoder().is_available()

    ready = all(checks.values())
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadinessResponse(ready=ready, checks=checks, version=settings.app.version)
