"""
Health Endpoints

Liveness for the load balancer, readiness for the orchestrator
platform. Readiness is about the alert path: the user store must
answer and the alert supervisor must still accept work.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from havyn import __version__
from havyn.config import get_settings
from havyn.infrastructure.database import get_db_manager

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str
    environment: str


class ReadinessResponse(BaseModel):
    """Overall verdict plus per-component detail."""

    ready: bool
    components: dict


@router.get(
    "",
    response_model=HealthResponse,
    summary="Liveness probe",
)
async def health_check() -> HealthResponse:
    """200 whenever the process is serving requests."""
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=get_settings().env,
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
)
async def readiness_check() -> ReadinessResponse:
    """
    Ready when crisis alerts can be raised.

    The chat model is reported but not required: screening and
    alerting work without it.
    """
    # Import inside function to avoid circular import
    from havyn.main import get_llm_provider, get_supervisor

    components: dict = {
        "database": await get_db_manager().health_check(),
        "alert_supervisor": False,
        "pending_alert_tasks": 0,
        "llm_configured": False,
    }

    try:
        supervisor = get_supervisor()
        components["alert_supervisor"] = not supervisor.is_closed
        components["pending_alert_tasks"] = supervisor.pending_count
        components["llm_configured"] = get_llm_provider().is_configured()
    except RuntimeError:
        # Startup has not finished
        pass

    return ReadinessResponse(
        ready=components["database"] and components["alert_supervisor"],
        components=components,
    )
