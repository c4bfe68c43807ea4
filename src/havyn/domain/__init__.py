"""
Havyn Domain Layer

Value objects and enums of the crisis pipeline, independent of
infrastructure.
"""

from havyn.domain.enums import CrisisSeverity, DeliveryOutcome, EscalationState, LocationSource
from havyn.domain.exceptions import (
    EmailDeliveryError,
    HavynError,
    PositionUnavailableError,
    UserNotFoundError,
)
from havyn.domain.models import (
    AlertPayload,
    DeliveryAttempt,
    GeoPoint,
    LocationRecord,
    RecipientSet,
    RiskVerdict,
    UserAccount,
)

__all__ = [
    # Enums
    "CrisisSeverity",
    "DeliveryOutcome",
    "EscalationState",
    "LocationSource",
    # Exceptions
    "HavynError",
    "UserNotFoundError",
    "PositionUnavailableError",
    "EmailDeliveryError",
    # Models
    "AlertPayload",
    "DeliveryAttempt",
    "GeoPoint",
    "LocationRecord",
    "RecipientSet",
    "RiskVerdict",
    "UserAccount",
]
