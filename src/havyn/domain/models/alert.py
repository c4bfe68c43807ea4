"""
Alert Models

Recipient sets, composed crisis alerts and delivery attempts.

SAFETY-CRITICAL: A RecipientSet never contains the triggering user's
own address; an alert sent to the person in crisis reaches nobody
able to help.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional

from havyn.domain.enums.crisis_severity import CrisisSeverity, DeliveryOutcome
from havyn.domain.models.geo import GeoPoint


def normalize_address(address: Optional[str]) -> str:
    """Comparison key for an email address."""
    return (address or "").strip().lower()


@dataclass(frozen=True)
class RecipientSet:
    """
    Ordered, de-duplicated alert recipients.

    Attributes:
        addresses: Non-empty addresses in priority order
        no_guardian_configured: True when the default helpline stood in
            for a missing guardian
    """

    addresses: tuple[str, ...] = ()
    no_guardian_configured: bool = False

    @classmethod
    def build(
        cls,
        candidates: Iterable[Optional[str]],
        *,
        exclude: Optional[str] = None,
        no_guardian_configured: bool = False,
    ) -> "RecipientSet":
        """
        Build a set from candidate addresses.

        Blank candidates are skipped, duplicates are dropped
        case-insensitively (first spelling wins), and any address
        matching `exclude` is removed.
        """
        excluded = normalize_address(exclude)
        seen: set[str] = set()
        addresses: list[str] = []

        for candidate in candidates:
            key = normalize_address(candidate)
            if not key or key in seen:
                continue
            seen.add(key)
            if excluded and key == excluded:
                continue
            addresses.append(candidate.strip())

        return cls(
            addresses=tuple(addresses),
            no_guardian_configured=no_guardian_configured,
        )

    @classmethod
    def empty(cls) -> "RecipientSet":
        return cls()

    def __iter__(self):
        return iter(self.addresses)

    def __len__(self) -> int:
        return len(self.addresses)

    def __contains__(self, address: object) -> bool:
        if not isinstance(address, str):
            return False
        return normalize_address(address) in {normalize_address(a) for a in self.addresses}

    @property
    def is_empty(self) -> bool:
        return not self.addresses


@dataclass(frozen=True)
class AlertPayload:
    """
    A composed crisis alert.

    Constructed once per incident and handed to exactly one delivery
    invocation. Never persisted.
    """

    subject: str
    body_html: str
    body_text: str
    recipients: RecipientSet
    crisis_snippet: str
    location: Optional[GeoPoint]
    triggered_at: datetime
    triggering_user_id: str
    severity: CrisisSeverity = CrisisSeverity.HIGH
    matched_signals: tuple[str, ...] = ()

    @property
    def has_location(self) -> bool:
        return self.location is not None


@dataclass(frozen=True)
class DeliveryAttempt:
    """
    One send of one alert to one recipient.

    Created at send time, logged, then discarded.
    """

    recipient: str
    attempt_number: int
    outcome: DeliveryOutcome
    error_detail: Optional[str] = None
    attempted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def succeeded(self) -> bool:
        return self.outcome == DeliveryOutcome.SENT

    def to_dict(self) -> dict:
        return {
            "attempt": self.attempt_number,
            "outcome": self.outcome.value,
            "error_detail": self.error_detail,
        }
