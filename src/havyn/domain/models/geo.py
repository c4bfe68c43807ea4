"""
Geographic Models

GeoPoint and the per-user cached location record.

The (0, 0) coordinate pair is reserved to mean "unknown" and is
never treated as a real location.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class GeoPoint:
    """
    A usable geographic point.

    Construct through from_coordinates() when the input is untrusted;
    it returns None instead of a point for missing, out-of-range or
    sentinel coordinates.
    """

    lat: float
    lng: float

    @property
    def is_usable(self) -> bool:
        return _usable(self.lat, self.lng)

    @classmethod
    def from_coordinates(cls, lat: Any, lng: Any) -> Optional["GeoPoint"]:
        """
        Build a point from raw values.

        Args:
            lat: Latitude (any numeric-like value or None)
            lng: Longitude (any numeric-like value or None)

        Returns:
            GeoPoint, or None if the pair is not a usable location
        """
        if lat is None or lng is None or isinstance(lat, bool) or isinstance(lng, bool):
            return None
        try:
            lat_f = float(lat)
            lng_f = float(lng)
        except (TypeError, ValueError):
            return None
        if not _usable(lat_f, lng_f):
            return None
        return cls(lat=lat_f, lng=lng_f)

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


def _usable(lat: float, lng: float) -> bool:
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        return False
    return not (lat == 0.0 and lng == 0.0)


@dataclass(frozen=True)
class LocationRecord:
    """
    Last known location of a user.

    Written opportunistically whenever a live read succeeds, read as
    a fallback when it fails. Never expires; staleness is accepted.
    """

    point: Optional[GeoPoint] = None
    updated_at: Optional[datetime] = None

    @property
    def has_point(self) -> bool:
        return self.point is not None

    @classmethod
    def empty(cls) -> "LocationRecord":
        return cls()
