"""
Resend Email Client

EmailClient implementation for the Resend HTTP API.
"""

from typing import Any, Optional

import httpx

from havyn.config import get_settings
from havyn.config.logging_config import get_logger
from havyn.domain.exceptions import EmailDeliveryError
from havyn.infrastructure.email.client import EmailClient, EmailMessage

logger = get_logger(__name__)


def _provider_error_message(response: httpx.Response) -> str:
    """Best-effort extraction of the provider's error message."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("message", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
            if isinstance(value, dict):
                nested = value.get("message")
                if isinstance(nested, str) and nested.strip():
                    return nested.strip()
    return response.text.strip() or f"HTTP {response.status_code}"


class ResendEmailClient(EmailClient):
    """
    Resend API client.

    One httpx.AsyncClient is created per instance and reused for every
    send. No retries happen here; the delivery pipeline owns retry.

    Usage:
        client = ResendEmailClient()
        await client.send(message)
        await client.close()
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize Resend client.

        Args:
            api_key: Resend API key (defaults to settings)
            api_url: API base URL (defaults to settings)
            timeout_seconds: Request timeout (defaults to settings)
            http_client: Pre-built client, mainly for tests
        """
        settings = get_settings()

        self._api_key = api_key or settings.email.api_key.get_secret_value()
        self._api_url = (api_url or settings.email.api_url).rstrip("/")
        timeout = timeout_seconds or settings.email.timeout_seconds

        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=min(timeout, 8.0)),
        )

    @property
    def provider_name(self) -> str:
        return "resend"

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def _build_payload(self, message: EmailMessage) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "from": message.sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        if message.text:
            payload["text"] = message.text
        if message.headers:
            payload["headers"] = dict(message.headers)
        return payload

    async def send(self, message: EmailMessage) -> None:
        if not self.is_configured():
            raise EmailDeliveryError("Resend API key not configured")

        try:
            response = await self._client.post(
                f"{self._api_url}/emails",
                headers={"Authorization": f"Bearer {self._api_key}"},
                json=self._build_payload(message),
            )
        except httpx.TimeoutException as e:
            raise EmailDeliveryError(f"Resend request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"Resend transport error: {e}") from e

        if response.status_code >= 400:
            raise EmailDeliveryError(
                _provider_error_message(response),
                status_code=response.status_code,
            )

        logger.debug(
            "Resend accepted email",
            status_code=response.status_code,
        )

    async def close(self) -> None:
        await self._client.aclose()
