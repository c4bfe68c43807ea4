"""
Delivery Pipeline

Sends a composed alert to every recipient independently, with exactly
one retry per recipient after a fixed delay.

SAFETY-CRITICAL: Delivery is at-least-once per recipient within two
attempts. A failure for one recipient never affects another, and
nothing here raises into the caller.

Retry runs inside the recipient's own background task with a
non-blocking sleep; no request, socket or database session is held
while waiting.
"""

import asyncio
from typing import Awaitable, Callable, Optional

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from havyn.config import get_settings
from havyn.config.logging_config import get_logger
from havyn.domain.enums.crisis_severity import DeliveryOutcome
from havyn.domain.exceptions import EmailDeliveryError
from havyn.domain.models.alert import AlertPayload, DeliveryAttempt
from havyn.infrastructure.email.client import EmailClient, EmailMessage
from havyn.infrastructure.metrics import track_delivery_abandoned, track_delivery_attempt
from havyn.services.alerting.task_supervisor import TaskSupervisor

logger = get_logger(__name__)

MAX_ATTEMPTS = 2


class DeliveryPipeline:
    """
    Per-recipient delivery with a single fixed-delay retry.

    Usage:
        pipeline = DeliveryPipeline(email_client, supervisor)
        pipeline.send(payload)  # returns immediately
    """

    def __init__(
        self,
        email_client: EmailClient,
        supervisor: TaskSupervisor,
        sender: Optional[str] = None,
        retry_delay_seconds: Optional[float] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Args:
            email_client: Transactional email client, built once at startup
            supervisor: Owner of the per-recipient tasks
            sender: From header (defaults to settings)
            retry_delay_seconds: Delay before the retry (defaults to settings)
            sleep: Awaitable sleep used between attempts
        """
        settings = get_settings()

        self._email = email_client
        self._supervisor = supervisor
        self._sender = sender or settings.email.sender
        self._retry_delay = (
            retry_delay_seconds
            if retry_delay_seconds is not None
            else settings.alert.retry_delay_seconds
        )
        self._sleep = sleep

    @property
    def retry_delay_seconds(self) -> float:
        return self._retry_delay

    def send(self, payload: AlertPayload) -> None:
        """
        Start one independent delivery task per recipient.

        Returns without awaiting any of them.
        """
        for recipient in payload.recipients:
            self._supervisor.spawn(
                self.deliver(recipient, payload),
                name=f"deliver-alert:{payload.triggering_user_id}",
            )

        logger.info(
            "Alert dispatched",
            user_id=payload.triggering_user_id,
            recipient_count=len(payload.recipients),
        )

    def build_message(self, recipient: str, payload: AlertPayload) -> EmailMessage:
        return EmailMessage(
            sender=self._sender,
            to=recipient,
            subject=payload.subject,
            html=payload.body_html,
            text=payload.body_text,
        )

    async def deliver(self, recipient: str, payload: AlertPayload) -> DeliveryAttempt:
        """
        Deliver to one recipient: attempt, wait, attempt again, give up.

        Returns:
            The last DeliveryAttempt; never raises
        """
        message = self.build_message(recipient, payload)
        retrying = AsyncRetrying(
            stop=stop_after_attempt(MAX_ATTEMPTS),
            wait=wait_fixed(self._retry_delay),
            retry=retry_if_exception_type(EmailDeliveryError),
            sleep=self._sleep,
            reraise=True,
        )

        last_attempt: Optional[DeliveryAttempt] = None
        try:
            async for attempt in retrying:
                with attempt:
                    last_attempt = await self._attempt(
                        recipient,
                        message,
                        attempt.retry_state.attempt_number,
                        user_id=payload.triggering_user_id,
                    )
        except EmailDeliveryError as e:
            track_delivery_abandoned()
            logger.error(
                "Alert delivery abandoned after retry",
                user_id=payload.triggering_user_id,
                attempts=MAX_ATTEMPTS,
            )
            return DeliveryAttempt(
                recipient=recipient,
                attempt_number=MAX_ATTEMPTS,
                outcome=DeliveryOutcome.FAILED,
                error_detail=e.detail,
            )

        return last_attempt

    async def _attempt(
        self,
        recipient: str,
        message: EmailMessage,
        attempt_number: int,
        user_id: str,
    ) -> DeliveryAttempt:
        """
        One send. Logs and counts the attempt.

        Raises:
            EmailDeliveryError: The send failed (any cause)
        """
        try:
            await self._email.send(message)
        except Exception as e:
            detail = e.detail if isinstance(e, EmailDeliveryError) else f"{type(e).__name__}: {e}"
            attempt = DeliveryAttempt(
                recipient=recipient,
                attempt_number=attempt_number,
                outcome=DeliveryOutcome.FAILED,
                error_detail=detail,
            )
            self._record(attempt, user_id)
            if attempt_number < MAX_ATTEMPTS:
                logger.info(
                    "Scheduling alert retry",
                    user_id=user_id,
                    delay_seconds=self._retry_delay,
                )
            raise EmailDeliveryError(detail) from e

        attempt = DeliveryAttempt(
            recipient=recipient,
            attempt_number=attempt_number,
            outcome=DeliveryOutcome.SENT,
        )
        self._record(attempt, user_id)
        return attempt

    def _record(self, attempt: DeliveryAttempt, user_id: str) -> None:
        track_delivery_attempt(attempt.attempt_number, attempt.outcome.value)
        log = logger.info if attempt.succeeded else logger.warning
        log(
            "Alert delivery attempt",
            user_id=user_id,
            recipient_domain=attempt.recipient.rpartition("@")[2],
            **attempt.to_dict(),
        )
