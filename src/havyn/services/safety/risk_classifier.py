"""
Risk Classifier

Keyword-tier crisis classifier for outgoing user messages.

SAFETY-CRITICAL: Runs synchronously in the request path for every
message, before and independently of the LLM call.

Matching is case-insensitive SUBSTRING matching, not tokenized and
not negation-aware. "I do NOT want to kill myself" is HIGH, and a
keyword embedded in a longer word still matches. Recall is preferred
over precision here; false positives cost an unnecessary email,
false negatives cost far more.
"""

from dataclasses import dataclass
from typing import Optional

from havyn.domain.enums.crisis_severity import CrisisSeverity
from havyn.domain.models.risk_verdict import RiskVerdict


@dataclass(frozen=True)
class KeywordTiers:
    """
    Ranked keyword lists.

    Keywords must be lowercase; the input text is lowercased before
    matching.
    """

    high: tuple[str, ...]
    medium: tuple[str, ...]
    low: tuple[str, ...]

    def in_priority_order(self) -> tuple[tuple[CrisisSeverity, tuple[str, ...]], ...]:
        return (
            (CrisisSeverity.HIGH, self.high),
            (CrisisSeverity.MEDIUM, self.medium),
            (CrisisSeverity.LOW, self.low),
        )

    @property
    def keyword_count(self) -> int:
        return len(self.high) + len(self.medium) + len(self.low)


# CLINICAL_REVIEW_REQUIRED: keyword lists
DEFAULT_KEYWORD_TIERS = KeywordTiers(
    high=(
        "suicide",
        "kill myself",
        "end my life",
        "want to die",
        "better off dead",
        "no reason to live",
        "ending it all",
        "take my life",
    ),
    medium=(
        "hurt myself",
        "self harm",
        "cut myself",
        "worthless",
        "give up",
        "can't go on",
        "no point",
    ),
    low=(
        "hopeless",
        "alone",
        "nobody cares",
        "hate myself",
    ),
)


class RiskClassifier:
    """
    Three-tier keyword classifier.

    Algorithm:
    1. Lowercase the text
    2. Scan HIGH, then MEDIUM, then LOW
    3. The first tier with any match wins; every keyword of that
       tier found in the text is collected, lower tiers are skipped

    The classifier holds no mutable state and performs no I/O, so a
    single instance is shared across requests.

    Usage:
        verdict = RiskClassifier().classify("I want to die")
        verdict.severity  # CrisisSeverity.HIGH
    """

    def __init__(self, tiers: Optional[KeywordTiers] = None) -> None:
        self._tiers = tiers or DEFAULT_KEYWORD_TIERS

    @property
    def tiers(self) -> KeywordTiers:
        return self._tiers

    def classify(self, text: str) -> RiskVerdict:
        """
        Classify a message.

        Args:
            text: Raw user message

        Returns:
            RiskVerdict; never raises
        """
        if not isinstance(text, str) or not text.strip():
            return RiskVerdict.safe()

        lowered = text.lower()

        for severity, keywords in self._tiers.in_priority_order():
            matched = tuple(keyword for keyword in keywords if keyword in lowered)
            if matched:
                return RiskVerdict(
                    is_crisis=severity.escalates,
                    severity=severity,
                    matched_signals=matched,
                )

        return RiskVerdict.safe()


_default_classifier = RiskClassifier()


def classify(text: str) -> RiskVerdict:
    """Classify with the default keyword tiers."""
    return _default_classifier.classify(text)


# Supportive replies shown while the alert flow runs in the background.
# The LOW reply is the softer empathetic line for informational matches.
CRISIS_RESPONSES: dict[CrisisSeverity, str] = {
    CrisisSeverity.HIGH: (
        "I'm hearing a lot of pain in your words, and I want you to know I'm right "
        "here with you. You're not alone, buddy. Let's breathe together for a second. "
        "Your life has value, and I'm here to support you through this. "
        "Would you like to talk about what you're feeling?"
    ),
    CrisisSeverity.MEDIUM: (
        "Hey, I'm noticing you're going through something really tough right now. "
        "I'm here for you, and I want you to know that these feelings won't last "
        "forever. You're stronger than you think. Can you tell me more about what's "
        "happening?"
    ),
    CrisisSeverity.LOW: (
        "I can hear that you're struggling, friend. It takes courage to share these "
        "feelings. I'm here to listen without judgment. What's weighing on your heart?"
    ),
}


def crisis_response(severity: CrisisSeverity) -> Optional[str]:
    """
    Get the empathetic canned reply for a severity.

    Returns:
        Reply text, or None for CrisisSeverity.NONE
    """
    return CRISIS_RESPONSES.get(severity)
