"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe. Returns 200 as long as the process is running."""
    return {"status": "healthy", "service": "onboarding"}


@router.get("/ready", response_model=None)
async def readiness(request: Request) -> dict[str, Any] | JSONResponse:
    """Readiness probe.

    The service holds no connections of its own; it is ready once the
    dependency container has been built. Upstreams are not probed here so
    that an identity provider outage does not take the pod out of rotation.
    """
    deps = getattr(request.app.state, "app_dependencies", None)
    if deps is None:
        return JSONResponse(status_code=503, content={"status": "not_ready"})

    return {
        "status": "ready",
        "identity_provider": deps.config.identity_provider.backend,
        "resource_service": deps.config.resource_service.backend,
    }
