"""Domain enums package."""

from havyn.domain.enums.crisis_severity import (
    CrisisSeverity,
    DeliveryOutcome,
    EscalationState,
    LocationSource,
)

__all__ = ["CrisisSeverity", "DeliveryOutcome", "EscalationState", "LocationSource"]
