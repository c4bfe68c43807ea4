"""
Positioning Sensors

Single-shot "get current position" sources. The resolver wraps every
read in its own timeout race, so a sensor that never answers cannot
stall an alert.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from havyn.domain.exceptions import PositionUnavailableError
from havyn.domain.models.geo import GeoPoint


class PositionSensor(ABC):
    """Abstract positioning sensor."""

    @abstractmethod
    async def get_current_position(self, timeout: float) -> GeoPoint:
        """
        Read the current position.

        Args:
            timeout: Caller-supplied timeout in seconds; sensors that
                talk to a device should pass it on

        Raises:
            PositionUnavailableError: Permission denied, unsupported
                platform or no fix
        """


class ClientReportedPositionSensor(PositionSensor):
    """
    Position fix the browser attached to the request.

    The browser owns the hardware sensor; the server only sees what
    the client reported alongside the message. Missing coordinates
    mean the user denied permission (or never granted it).
    """

    def __init__(self, lat: Any = None, lng: Any = None) -> None:
        self._lat = lat
        self._lng = lng

    async def get_current_position(self, timeout: float) -> GeoPoint:
        if self._lat is None or self._lng is None:
            raise PositionUnavailableError("permission_denied")

        point = GeoPoint.from_coordinates(self._lat, self._lng)
        if point is None:
            raise PositionUnavailableError("position_unavailable")
        return point

    @classmethod
    def from_payload(cls, payload: Optional[dict]) -> "ClientReportedPositionSensor":
        """Build from a {"lat": ..., "lng": ...} request fragment."""
        if not payload:
            return cls()
        return cls(payload.get("lat"), payload.get("lng"))


class NullPositionSensor(PositionSensor):
    """Sensor for contexts with no positioning capability."""

    async def get_current_position(self, timeout: float) -> GeoPoint:
        raise PositionUnavailableError("unsupported")
