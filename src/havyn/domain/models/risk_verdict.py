"""
Risk Verdict

Output of the keyword risk classifier for a single message.
"""

from dataclasses import dataclass

from havyn.domain.enums.crisis_severity import CrisisSeverity


@dataclass(frozen=True)
class RiskVerdict:
    """
    Severity verdict for one message.

    Immutable and produced fresh per message; never persisted.

    Attributes:
        is_crisis: True iff severity is HIGH or MEDIUM
        severity: Winning keyword tier
        matched_signals: Keywords of the winning tier found in the text,
            in keyword-list order
    """

    is_crisis: bool
    severity: CrisisSeverity
    matched_signals: tuple[str, ...] = ()

    @classmethod
    def safe(cls) -> "RiskVerdict":
        """Verdict for a message with no matches."""
        return cls(is_crisis=False, severity=CrisisSeverity.NONE, matched_signals=())

    def to_dict(self) -> dict:
        return {
            "is_crisis": self.is_crisis,
            "severity": self.severity.value,
            "matched_signals": list(self.matched_signals),
        }
