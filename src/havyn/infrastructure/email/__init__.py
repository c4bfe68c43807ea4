"""Transactional email infrastructure."""

from havyn.infrastructure.email.client import EmailClient, EmailMessage, PRIORITY_HEADERS
from havyn.infrastructure.email.resend_client import ResendEmailClient

__all__ = [
    "EmailClient",
    "EmailMessage",
    "PRIORITY_HEADERS",
    "ResendEmailClient",
]
