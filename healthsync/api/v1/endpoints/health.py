"""Health check endpoints."""

from fastapi import APIRouter, status

from healthsync.config import settings
from healthsync.core.redis_client import check_redis_connection
from healthsync.core.store_client import check_store_connection
from healthsync.schemas.base import ApiResponse

router = APIRouter()


class HealthResponse(ApiResponse):
    """Health check response model."""

    status: str
    version: str
    environment: str


class DetailedHealthResponse(HealthResponse):
    """Health check response including backing services."""

    store: str
    redis: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
)
async def health_check() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Detailed health check",
)
async def detailed_health_check() -> DetailedHealthResponse:
    """
    Detailed health check with document store and Redis status.

    Redis only backs caches, so an unreachable Redis degrades the service
    without failing it.
    """
    store_healthy = await check_store_connection()
    redis_healthy = await check_redis_connection()

    return DetailedHealthResponse(
        status="healthy" if store_healthy and redis_healthy else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        store="healthy" if store_healthy else "unhealthy",
        redis="healthy" if redis_healthy else "unhealthy",
    )


@router.get(
    "/ping",
    status_code=status.HTTP_200_OK,
    summary="Simple ping",
)
async def ping() -> dict[str, str]:
    return {"message": "pong"}
