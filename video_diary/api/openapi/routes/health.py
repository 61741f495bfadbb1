"""Health check endpoints."""

import os
from enum import Enum

from fastapi import APIRouter
from pydantic import BaseModel, Field

from video_diary.api.dependencies import ServicesDep, SettingsDep

router = APIRouter()


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Health status of a single component."""

    name: str = Field(description="Component name")
    status: HealthStatus = Field(description="Component health status")
    message: str | None = Field(default=None, description="Additional details")


class HealthResponse(BaseModel):
    """Health check response."""

    status: HealthStatus = Field(description="Overall health status")
    version: str = Field(description="Application version")
    environment: str = Field(description="Deployment environment")
    components: list[ComponentHealth] = Field(
        default_factory=list,
        description="Individual component health",
    )


class LivenessResponse(BaseModel):
    """Simple liveness response."""

    status: str = Field(default="ok")


def _feature(name: str, active: bool) -> ComponentHealth:
    # Disabled features still report healthy
    return ComponentHealth(
        name=name,
        status=HealthStatus.HEALTHY,
        message="enabled" if active else "disabled",
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Get overall health status of the service and its components.",
)
async def health_check(
    settings: SettingsDep,
    services: ServicesDep,
) -> HealthResponse:
    """Check health of all service components."""
    components: list[ComponentHealth] = []
    overall_status = HealthStatus.HEALTHY

    root = services.store.root_directory
    writable = root.is_dir() and os.access(root, os.W_OK)
    if writable or not root.exists():
        components.append(
            ComponentHealth(
                name="storage",
                status=HealthStatus.HEALTHY,
                message=str(root),
            )
        )
    else:
        components.append(
            ComponentHealth(
                name="storage",
                status=HealthStatus.UNHEALTHY,
                message=f"{root} is not writable",
            )
        )
        overall_status = HealthStatus.UNHEALTHY

    if services.worker.is_running:
        components.append(
            ComponentHealth(
                name="processing_worker",
                status=HealthStatus.HEALTHY,
                message=f"{len(services.queue)} queued",
            )
        )
    else:
        components.append(
            ComponentHealth(
                name="processing_worker",
                status=HealthStatus.DEGRADED,
                message="not running",
            )
        )
        if overall_status == HealthStatus.HEALTHY:
            overall_status = HealthStatus.DEGRADED

    components.append(_feature("transcription", settings.transcription.is_active))
    components.append(
        _feature(
            "summaries",
            settings.summaries.enabled and settings.llm.is_configured,
        )
    )
    components.append(_feature("semantic_search", services.search_index.semantic_enabled))

    return HealthResponse(
        status=overall_status,
        version=settings.app.version,
        environment=settings.app.environment,
        components=components,
    )


@router.get(
    "/health/live",
    response_model=LivenessResponse,
    summary="Liveness check",
    description="Simple liveness check for container orchestrators.",
)
async def liveness() -> LivenessResponse:
    """Simple liveness check - just verifies the app is running."""
    return LivenessResponse(status="ok")
