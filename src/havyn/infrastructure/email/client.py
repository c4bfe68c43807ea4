"""
Transactional Email Client Interface

Contract between the delivery pipeline and the email provider.
A client is constructed once at startup and injected; tests
substitute a fake.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


# Priority headers understood by common mail clients
PRIORITY_HEADERS: dict[str, str] = {
    "X-Priority": "1",
    "Importance": "high",
}


@dataclass(frozen=True)
class EmailMessage:
    """
    One outgoing email to a single recipient.

    Attributes:
        sender: From header, e.g. "Name <addr@example.org>"
        to: Recipient address
        subject: Subject line
        html: HTML body
        text: Plain-text alternative
        headers: Extra headers
    """

    sender: str
    to: str
    subject: str
    html: str
    text: str = ""
    headers: dict[str, str] = field(default_factory=lambda: dict(PRIORITY_HEADERS))


class EmailClient(ABC):
    """
    Abstract transactional email client.

    send() either returns normally (accepted by the provider) or raises
    EmailDeliveryError with a detail string. Every error is treated as
    retryable exactly once by the delivery pipeline.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider name for logging."""

    @abstractmethod
    async def send(self, message: EmailMessage) -> None:
        """
        Send one message.

        Raises:
            EmailDeliveryError: On any provider or transport failure
        """

    async def close(self) -> None:
        """Release network resources."""
