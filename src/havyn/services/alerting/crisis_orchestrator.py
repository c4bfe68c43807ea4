"""
Crisis Orchestrator

Screens every outgoing user message and, when it escalates, runs the
alert flow as a supervised background task:

    load user -> resolve location + recipients -> compose -> dispatch

SAFETY-CRITICAL: The request path only classifies and hands off. No
failure in the alert flow (sensor, database, email provider) reaches
the user-visible response.

CLINICAL_REVIEW_REQUIRED: Escalation threshold (HIGH or MEDIUM).
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from havyn.config.logging_config import get_logger
from havyn.domain.enums.crisis_severity import CrisisSeverity, EscalationState
from havyn.domain.models.risk_verdict import RiskVerdict
from havyn.infrastructure.database.user_store import UserAccountStore
from havyn.infrastructure.email.client import EmailClient
from havyn.infrastructure.location.sensor import PositionSensor
from havyn.infrastructure.metrics import (
    track_alert_composed,
    track_classification,
    track_escalation_finished,
    track_escalation_started,
)
from havyn.services.alerting.alert_composer import AlertComposer
from havyn.services.alerting.delivery_pipeline import DeliveryPipeline
from havyn.services.alerting.location_resolver import LocationResolver
from havyn.services.alerting.recipient_resolver import RecipientResolver
from havyn.services.alerting.task_supervisor import TaskSupervisor
from havyn.services.safety.risk_classifier import RiskClassifier, crisis_response

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class MessageScreening:
    """
    Result of screening one message in the request path.

    Attributes:
        verdict: Classifier verdict
        reply: Canned supportive reply for the severity, if any
        escalated: Whether a background alert flow was started
    """

    verdict: RiskVerdict
    reply: Optional[str]
    escalated: bool

    def to_dict(self) -> dict:
        return {
            **self.verdict.to_dict(),
            "escalated": self.escalated,
        }


@dataclass(frozen=True)
class AlertAcknowledgement:
    """Immediate answer to an explicit alert trigger."""

    escalated: bool
    status: str = "processing"


class CrisisOrchestrator:
    """
    Classification in the request path, alerting in the background.

    Usage:
        orchestrator = CrisisOrchestrator.build(store, email_client, supervisor)
        screening = orchestrator.handle_message(user_id, text, sensor)
    """

    def __init__(
        self,
        store: UserAccountStore,
        classifier: RiskClassifier,
        location_resolver: LocationResolver,
        recipient_resolver: RecipientResolver,
        composer: AlertComposer,
        pipeline: DeliveryPipeline,
        supervisor: TaskSupervisor,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._classifier = classifier
        self._locations = location_resolver
        self._recipients = recipient_resolver
        self._composer = composer
        self._pipeline = pipeline
        self._supervisor = supervisor
        self._clock = clock

    @classmethod
    def build(
        cls,
        store: UserAccountStore,
        email_client: EmailClient,
        supervisor: TaskSupervisor,
    ) -> "CrisisOrchestrator":
        """Wire the default collaborators from settings."""
        return cls(
            store=store,
            classifier=RiskClassifier(),
            location_resolver=LocationResolver(store),
            recipient_resolver=RecipientResolver(store),
            composer=AlertComposer(),
            pipeline=DeliveryPipeline(email_client, supervisor),
            supervisor=supervisor,
        )

    @property
    def classifier(self) -> RiskClassifier:
        return self._classifier

    @property
    def supervisor(self) -> TaskSupervisor:
        return self._supervisor

    def handle_message(
        self,
        user_id: str,
        message: str,
        sensor: Optional[PositionSensor] = None,
    ) -> MessageScreening:
        """
        Screen one message. Never awaits, never raises.

        Must be called from inside the event loop when the message
        can escalate.
        """
        start = time.perf_counter()
        verdict = self._classifier.classify(message)
        track_classification(verdict.severity.value, time.perf_counter() - start)

        escalated = False
        if verdict.is_crisis:
            logger.warning(
                "Crisis keywords detected",
                user_id=user_id,
                severity=verdict.severity.value,
                matched_signals=list(verdict.matched_signals),
            )
            escalated = self._hand_off(user_id, message, verdict, sensor)

        return MessageScreening(
            verdict=verdict,
            reply=crisis_response(verdict.severity),
            escalated=escalated,
        )

    def trigger_alert(
        self,
        user_id: str,
        crisis_snippet: str,
        sensor: Optional[PositionSensor] = None,
        verdict: Optional[RiskVerdict] = None,
    ) -> AlertAcknowledgement:
        """
        Start the alert flow for a crisis the client already detected.

        The snippet is re-classified for the alert metadata; an
        explicit trigger escalates even when no keyword matches.
        A forced HIGH carries no signals, since none came from that tier.
        """
        if verdict is None:
            verdict = self._classifier.classify(crisis_snippet)
        if not verdict.is_crisis:
            verdict = RiskVerdict(
                is_crisis=True,
                severity=CrisisSeverity.HIGH,
                matched_signals=(),
            )

        logger.warning(
            "Crisis alert triggered",
            user_id=user_id,
            severity=verdict.severity.value,
        )
        return AlertAcknowledgement(
            escalated=self._hand_off(user_id, crisis_snippet, verdict, sensor),
        )

    def _hand_off(
        self,
        user_id: str,
        message: str,
        verdict: RiskVerdict,
        sensor: Optional[PositionSensor],
    ) -> bool:
        try:
            self._supervisor.spawn(
                self.escalate(user_id, message, verdict, sensor),
                name=f"escalate:{user_id}",
            )
        except Exception as e:
            logger.error(
                "Failed to hand off escalation",
                user_id=user_id,
                error=str(e),
            )
            return False

        track_escalation_started(verdict.severity.value)
        return True

    async def escalate(
        self,
        user_id: str,
        message: str,
        verdict: RiskVerdict,
        sensor: Optional[PositionSensor] = None,
    ) -> EscalationState:
        """
        Background body of one incident.

        Returns:
            DONE, or ABORTED when the user record is missing or the
            flow failed unexpectedly. Never raises.
        """
        try:
            state = await self._run(user_id, message, verdict, sensor)
        except Exception as e:
            logger.error(
                "Escalation failed",
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            state = EscalationState.ABORTED

        track_escalation_finished(state.value)
        return state

    async def _run(
        self,
        user_id: str,
        message: str,
        verdict: RiskVerdict,
        sensor: Optional[PositionSensor],
    ) -> EscalationState:
        now = self._clock()

        try:
            user = await self._store.get_user(user_id)
        except Exception as e:
            logger.error("User lookup failed during escalation", user_id=user_id, error=str(e))
            user = None

        if user is None:
            logger.error("Escalation aborted: user not found", user_id=user_id)
            return EscalationState.ABORTED

        logger.debug("Escalation state", user_id=user_id, state=EscalationState.RESOLVING.value)
        location, recipients = await asyncio.gather(
            self._locations.resolve(user.user_id, sensor),
            self._recipients.resolve(user.user_id),
        )

        if recipients.is_empty:
            # Degrade, don't abort: the alert is composed and dispatch is a no-op
            logger.error("Escalation has no recipients", user_id=user_id)

        logger.debug("Escalation state", user_id=user_id, state=EscalationState.COMPOSING.value)
        payload = self._composer.compose(
            user=user,
            verdict=verdict,
            crisis_snippet=message,
            location=location,
            recipients=recipients,
            now=now,
        )
        track_alert_composed(recipients.no_guardian_configured)

        logger.debug("Escalation state", user_id=user_id, state=EscalationState.DISPATCHING.value)
        self._pipeline.send(payload)

        logger.info(
            "Escalation dispatched",
            user_id=user_id,
            severity=verdict.severity.value,
            recipient_count=len(recipients),
            has_location=location is not None,
            no_guardian=recipients.no_guardian_configured,
        )
        return EscalationState.DONE
