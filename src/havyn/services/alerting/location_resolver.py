"""
Location Resolver

Produces the best available location for an alert:
live sensor fix, else the cached last-known point, else nothing.

SAFETY-CRITICAL: Never raises and never waits longer than the
configured sensor timeout. A missing location degrades the alert;
it never stops it.
"""

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional

from havyn.config import get_settings
from havyn.config.logging_config import get_logger
from havyn.domain.enums.crisis_severity import LocationSource
from havyn.domain.exceptions import PositionUnavailableError
from havyn.domain.models.geo import GeoPoint
from havyn.infrastructure.database.user_store import UserAccountStore
from havyn.infrastructure.location.sensor import NullPositionSensor, PositionSensor
from havyn.infrastructure.metrics import track_location_resolution

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LocationResolver:
    """
    Live-then-cached location resolution.

    Usage:
        resolver = LocationResolver(store)
        point = await resolver.resolve(user_id, sensor)
    """

    def __init__(
        self,
        store: UserAccountStore,
        timeout_seconds: Optional[float] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """
        Args:
            store: User-account store holding the location cache
            timeout_seconds: Live read bound (defaults to settings)
            clock: Timestamp source for cache writes
        """
        self._store = store
        self._timeout = (
            timeout_seconds
            if timeout_seconds is not None
            else get_settings().alert.location_timeout_seconds
        )
        self._clock = clock

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    async def resolve(
        self,
        user_id: str,
        sensor: Optional[PositionSensor] = None,
    ) -> Optional[GeoPoint]:
        """
        Resolve a location for the user.

        Returns:
            A usable GeoPoint, or None
        """
        point = await self._read_live(user_id, sensor or NullPositionSensor())
        if point is not None:
            await self._write_cache(user_id, point)
            track_location_resolution(LocationSource.LIVE)
            return point

        point = await self._read_cache(user_id)
        if point is not None:
            track_location_resolution(LocationSource.CACHED)
            return point

        logger.info("No location available for alert", user_id=user_id)
        track_location_resolution(LocationSource.NONE)
        return None

    async def _read_live(
        self,
        user_id: str,
        sensor: PositionSensor,
    ) -> Optional[GeoPoint]:
        try:
            # wait_for cancels the sensor read when the timer wins
            point = await asyncio.wait_for(
                sensor.get_current_position(self._timeout),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.info(
                "Live location timed out",
                user_id=user_id,
                timeout=self._timeout,
            )
            return None
        except PositionUnavailableError as e:
            logger.info("Live location unavailable", user_id=user_id, reason=e.reason)
            return None
        except Exception as e:
            logger.warning("Live location read failed", user_id=user_id, error=str(e))
            return None

        if point is None or not point.is_usable:
            logger.info("Live location unusable", user_id=user_id)
            return None
        return point

    async def _write_cache(self, user_id: str, point: GeoPoint) -> None:
        try:
            await self._store.set_cached_location(user_id, point, self._clock())
        except Exception as e:
            logger.warning(
                "Failed to cache live location",
                user_id=user_id,
                error=str(e),
            )

    async def _read_cache(self, user_id: str) -> Optional[GeoPoint]:
        try:
            record = await self._store.get_cached_location(user_id)
        except Exception as e:
            logger.warning(
                "Failed to read cached location",
                user_id=user_id,
                error=str(e),
            )
            return None

        if record.point is None or not record.point.is_usable:
            return None
        return record.point
