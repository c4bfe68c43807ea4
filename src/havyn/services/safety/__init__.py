"""Safety services package - keyword crisis screening."""

from havyn.services.safety.risk_classifier import (
    CRISIS_RESPONSES,
    DEFAULT_KEYWORD_TIERS,
    KeywordTiers,
    RiskClassifier,
    classify,
    crisis_response,
)

__all__ = [
    "CRISIS_RESPONSES",
    "DEFAULT_KEYWORD_TIERS",
    "KeywordTiers",
    "RiskClassifier",
    "classify",
    "crisis_response",
]
