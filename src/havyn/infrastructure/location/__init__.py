"""Positioning sensor infrastructure."""

from havyn.infrastructure.location.sensor import (
    ClientReportedPositionSensor,
    NullPositionSensor,
    PositionSensor,
)

__all__ = [
    "ClientReportedPositionSensor",
    "NullPositionSensor",
    "PositionSensor",
]
