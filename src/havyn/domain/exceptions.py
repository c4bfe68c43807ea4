"""
Domain Exceptions

Errors raised by collaborators of the crisis pipeline. None of these
may escape the escalation path; they are caught and degraded where
they occur.
"""

from typing import Optional


class HavynError(Exception):
    """Base exception for Havyn errors."""


class UserNotFoundError(HavynError):
    """The user-account store has no record for an id."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class PositionUnavailableError(HavynError):
    """
    The positioning sensor could not produce a fix.

    Attributes:
        reason: permission_denied, unsupported or position_unavailable
    """

    def __init__(self, reason: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"Position unavailable: {reason}")
        self.reason = reason


class EmailDeliveryError(HavynError):
    """The transactional email provider rejected or failed a send."""

    def __init__(self, detail: str, status_code: Optional[int] = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code
