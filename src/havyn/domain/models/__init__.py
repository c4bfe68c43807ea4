"""Domain models package."""

from havyn.domain.models.risk_verdict import RiskVerdict
from havyn.domain.models.geo import GeoPoint, LocationRecord
from havyn.domain.models.user_account import UserAccount, UNKNOWN_USER_NAME
from havyn.domain.models.alert import (
    AlertPayload,
    DeliveryAttempt,
    RecipientSet,
    normalize_address,
)

__all__ = [
    "RiskVerdict",
    "GeoPoint",
    "LocationRecord",
    "UserAccount",
    "UNKNOWN_USER_NAME",
    "AlertPayload",
    "DeliveryAttempt",
    "RecipientSet",
    "normalize_address",
]
