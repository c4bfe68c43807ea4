"""
User Location Endpoints

Read and write the cached last-known location used as the fallback
when a live fix is unavailable during an alert.
"""

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from havyn.config.logging_config import get_logger
from havyn.domain.exceptions import UserNotFoundError
from havyn.domain.models.geo import GeoPoint

logger = get_logger(__name__)
router = APIRouter()


class SaveLocationRequest(BaseModel):
    """Location fix reported by the client."""

    user_id: str = Field(..., min_length=1, max_length=255)
    lat: float
    lng: float


class SaveLocationResponse(BaseModel):
    success: bool
    message: str
    timestamp: datetime


class CachedLocationResponse(BaseModel):
    """Cached last-known location; nulls when none is stored."""

    lat: Optional[float] = None
    lng: Optional[float] = None
    last_update: Optional[datetime] = None
    cached: bool
    message: Optional[str] = None


@router.post(
    "/location",
    response_model=SaveLocationResponse,
    summary="Save the user's last known location",
)
async def save_location(request: SaveLocationRequest) -> SaveLocationResponse:
    """Overwrite the cached location (last write wins)."""
    # Import inside function to avoid circular import
    from havyn.main import get_user_store

    point = GeoPoint.from_coordinates(request.lat, request.lng)
    if point is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid coordinates",
        )

    now = datetime.now(timezone.utc)
    try:
        await get_user_store().set_cached_location(request.user_id, point, now)
    except UserNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    logger.info("Location cached", user_id=request.user_id)

    return SaveLocationResponse(
        success=True,
        message="Location saved successfully",
        timestamp=now,
    )


@router.get(
    "/location",
    response_model=CachedLocationResponse,
    summary="Get the user's cached location",
)
async def get_location(
    user_id: str = Query(..., min_length=1, max_length=255),
) -> CachedLocationResponse:
    from havyn.main import get_user_store

    record = await get_user_store().get_cached_location(user_id)
    if record.point is None:
        return CachedLocationResponse(
            cached=False,
            message="No cached location available",
        )

    return CachedLocationResponse(
        lat=record.point.lat,
        lng=record.point.lng,
        last_update=record.updated_at,
        cached=True,
    )
