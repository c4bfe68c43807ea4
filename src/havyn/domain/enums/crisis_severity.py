"""
Crisis Severity and Pipeline State Enumerations

Defines the keyword-tier severity levels produced by the risk
classifier, the lifecycle states of an escalation, and delivery
outcomes for crisis alert emails.
"""

from enum import StrEnum


class CrisisSeverity(StrEnum):
    """
    Severity tier of a classified message.

    Tiers are checked HIGH -> MEDIUM -> LOW and the first tier
    with a match wins.
    """

    HIGH = "high"
    """Explicit suicidal language. Escalates."""

    MEDIUM = "medium"
    """Self-harm or giving-up language. Escalates."""

    LOW = "low"
    """
    Distress without explicit risk.
    Informational only: earns a softer reply, never an alert.
    """

    NONE = "none"
    """No keyword matched."""

    @property
    def escalates(self) -> bool:
        """Whether this tier enters the background alert flow."""
        return self in (CrisisSeverity.HIGH, CrisisSeverity.MEDIUM)


class EscalationState(StrEnum):
    """
    Lifecycle of one message through the crisis orchestrator.

    IDLE -> CLASSIFYING -> (NOT_CRISIS | ESCALATING) -> RESOLVING
    -> COMPOSING -> DISPATCHING -> DONE

    ABORTED is terminal for incidents whose user record is missing.
    """

    IDLE = "idle"
    CLASSIFYING = "classifying"
    NOT_CRISIS = "not_crisis"
    ESCALATING = "escalating"
    RESOLVING = "resolving"
    COMPOSING = "composing"
    DISPATCHING = "dispatching"
    DONE = "done"
    ABORTED = "aborted"


class DeliveryOutcome(StrEnum):
    """Outcome of a single alert email attempt."""

    SENT = "sent"
    FAILED = "failed"


class LocationSource(StrEnum):
    """Where a resolved location came from."""

    LIVE = "live"
    CACHED = "cached"
    NONE = "none"
