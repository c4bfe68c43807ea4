"""
User Account Snapshot

Read-only view of the user-account fields the crisis pipeline needs.
Owned by the user-account store; the pipeline never mutates it.
"""

from dataclasses import dataclass, field
from typing import Optional

from havyn.domain.models.geo import LocationRecord


UNKNOWN_USER_NAME = "Unknown User"


@dataclass(frozen=True)
class UserAccount:
    """
    Attributes:
        user_id: Opaque user identifier
        email: The user's own address (never an alert recipient)
        display_name: Chosen name, if any
        guardian_email: Emergency contact, if configured
        helpline_email: Secondary helpline override, if configured
        location: Cached last known location
    """

    user_id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    guardian_email: Optional[str] = None
    helpline_email: Optional[str] = None
    location: LocationRecord = field(default_factory=LocationRecord)

    @property
    def name_for_display(self) -> str:
        """Name, else email, else a fixed placeholder."""
        for candidate in (self.display_name, self.email):
            if candidate and candidate.strip():
                return candidate.strip()
        return UNKNOWN_USER_NAME

    @property
    def has_guardian(self) -> bool:
        return bool(self.guardian_email and self.guardian_email.strip())
