"""
Chat Endpoints

Main interaction point for user conversations.

SAFETY-CRITICAL: Every message is screened by the crisis orchestrator
before the model is called. The screening result (and any alert it
started) does not depend on the model answering.
"""

from typing import Literal, Optional

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from havyn.config.logging_config import get_logger
from havyn.infrastructure.llm import ChatTurn, LLMProviderError, RateLimitError
from havyn.infrastructure.location import ClientReportedPositionSensor
from havyn.services.prompt import (
    COMPANION_SYSTEM_PROMPT,
    RATE_LIMIT_REPLY,
    RATE_LIMIT_RETRY_AFTER_SECONDS,
    get_fallback_reply,
)

logger = get_logger(__name__)
router = APIRouter()


# Request/Response Models

class LocationFix(BaseModel):
    """Position the browser attached to the request, if permitted."""

    lat: Optional[float] = None
    lng: Optional[float] = None


class HistoryTurn(BaseModel):
    """One prior turn of the conversation."""

    role: Literal["user", "assistant"]
    content: str


class ChatMessageRequest(BaseModel):
    """Request to send a chat message."""

    user_id: str = Field(..., min_length=1, max_length=255, description="User id or email")
    message: str = Field(..., min_length=1, description="User message, screened in full")
    history: list[HistoryTurn] = Field(default_factory=list)
    location: Optional[LocationFix] = None


class ChatMessageResponse(BaseModel):
    """Response with Havyn's reply and the screening result."""

    response: str
    severity: str
    is_crisis: bool
    escalated: bool
    matched_signals: list[str]
    support_message: Optional[str] = None
    retry_after: Optional[int] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "response": "I hear you, truly. I'm right here with you...",
                "severity": "none",
                "is_crisis": False,
                "escalated": False,
                "matched_signals": [],
                "support_message": None,
                "retry_after": None,
            }
        }
    )


@router.post(
    "/message",
    response_model=ChatMessageResponse,
    summary="Send a message and receive Havyn's reply",
)
async def send_message(request: ChatMessageRequest):
    """
    Send a chat message.

    The message is classified first; a HIGH or MEDIUM verdict starts
    the background alert flow before the model is called. Model
    failures become a friendly fallback line:
    - rate limited: 429 with retry_after
    - any other error: 200 with a degraded reply
    """
    # Import inside function to avoid circular import
    from havyn.main import get_orchestrator, get_llm_provider

    sensor = ClientReportedPositionSensor.from_payload(
        request.location.model_dump() if request.location else None
    )
    screening = get_orchestrator().handle_message(request.user_id, request.message, sensor)
    verdict = screening.verdict

    def build(text: str, retry_after: Optional[int] = None) -> ChatMessageResponse:
        return ChatMessageResponse(
            response=text,
            severity=verdict.severity.value,
            is_crisis=verdict.is_crisis,
            escalated=screening.escalated,
            matched_signals=list(verdict.matched_signals),
            support_message=screening.reply,
            retry_after=retry_after,
        )

    history = [ChatTurn(role=turn.role, content=turn.content) for turn in request.history]

    try:
        llm_response = await get_llm_provider().generate(
            COMPANION_SYSTEM_PROMPT,
            history,
            request.message,
        )
    except RateLimitError as e:
        retry_after = e.retry_after_seconds or RATE_LIMIT_RETRY_AFTER_SECONDS
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content=build(RATE_LIMIT_REPLY, retry_after=retry_after).model_dump(),
            headers={"Retry-After": str(retry_after)},
        )
    except LLMProviderError as e:
        logger.warning(
            "LLM unavailable, using fallback reply",
            user_id=request.user_id,
            provider=e.provider,
        )
        return build(get_fallback_reply(verdict.severity))

    return build(llm_response.content.strip() or get_fallback_reply(verdict.severity))
