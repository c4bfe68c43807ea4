"""
API v1 Router

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter

from havyn.api.v1.endpoints.health import router as health_router
from havyn.api.v1.endpoints.chat import router as chat_router
from havyn.api.v1.endpoints.safety import router as safety_router
from havyn.api.v1.endpoints.location import router as location_router

api_router = APIRouter()

api_router.include_router(
    health_router,
    prefix="/health",
    tags=["Health"],
)

api_router.include_router(
    chat_router,
    prefix="/chat",
    tags=["Chat"],
)

api_router.include_router(
    safety_router,
    prefix="/safety",
    tags=["Safety"],
)

api_router.include_router(
    location_router,
    prefix="/user",
    tags=["User"],
)
