"""
Safety Endpoints

Explicit crisis alert trigger for a crisis the client already
detected. Answers immediately; the alert is sent in the background.
"""

from typing import Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from havyn.api.v1.endpoints.chat import LocationFix
from havyn.config.logging_config import get_logger
from havyn.infrastructure.location import ClientReportedPositionSensor

logger = get_logger(__name__)
router = APIRouter()


class SafetyAlertRequest(BaseModel):
    """Request to start a crisis alert."""

    user_id: str = Field(..., min_length=1, max_length=255, description="User id or email")
    crisis_snippet: str = Field(..., min_length=1, description="Triggering message, verbatim")
    location: Optional[LocationFix] = None


class SafetyAlertResponse(BaseModel):
    """Immediate acknowledgement of a crisis alert."""

    message: str
    status: str
    no_guardian: bool


@router.post(
    "/alert",
    response_model=SafetyAlertResponse,
    summary="Trigger a crisis alert",
)
async def trigger_safety_alert(request: SafetyAlertRequest) -> SafetyAlertResponse:
    """
    Start the background alert flow and return right away.

    `no_guardian` comes from a quick account lookup so the client can
    tell the user the helpline was notified. A failed lookup reports
    True.
    """
    # Import inside function to avoid circular import
    from havyn.main import get_orchestrator, get_user_store

    sensor = ClientReportedPositionSensor.from_payload(
        request.location.model_dump() if request.location else None
    )
    acknowledgement = get_orchestrator().trigger_alert(
        request.user_id,
        request.crisis_snippet,
        sensor=sensor,
    )

    no_guardian = True
    try:
        user = await get_user_store().get_user(request.user_id)
        no_guardian = user is None or not user.has_guardian
    except Exception as e:
        logger.warning(
            "Guardian lookup failed for alert acknowledgement",
            user_id=request.user_id,
            error=str(e),
        )

    return SafetyAlertResponse(
        message="Safety alert initiated",
        status=acknowledgement.status,
        no_guardian=no_guardian,
    )
