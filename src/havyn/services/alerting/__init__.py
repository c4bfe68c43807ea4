"""Alerting services package - background crisis alert flow."""

from havyn.services.alerting.task_supervisor import TaskSupervisor
from havyn.services.alerting.location_resolver import LocationResolver
from havyn.services.alerting.recipient_resolver import RecipientResolver, build_recipients
from havyn.services.alerting.alert_composer import AlertBranding, AlertComposer
from havyn.services.alerting.delivery_pipeline import DeliveryPipeline
from havyn.services.alerting.crisis_orchestrator import (
    AlertAcknowledgement,
    CrisisOrchestrator,
    MessageScreening,
)

__all__ = [
    "TaskSupervisor",
    "LocationResolver",
    "RecipientResolver",
    "build_recipients",
    "AlertBranding",
    "AlertComposer",
    "DeliveryPipeline",
    "AlertAcknowledgement",
    "CrisisOrchestrator",
    "MessageScreening",
]
