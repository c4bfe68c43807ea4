"""Metrics infrastructure package."""

from havyn.infrastructure.metrics.prometheus_metrics import (
    # Classification metrics
    MESSAGES_CLASSIFIED_TOTAL,
    CLASSIFICATION_LATENCY,
    # Escalation metrics
    ESCALATIONS_STARTED_TOTAL,
    ESCALATIONS_FINISHED_TOTAL,
    LOCATION_RESOLUTIONS_TOTAL,
    ALERTS_COMPOSED_TOTAL,
    BACKGROUND_TASKS_IN_FLIGHT,
    # Delivery metrics
    DELIVERY_ATTEMPTS_TOTAL,
    DELIVERIES_ABANDONED_TOTAL,
    # LLM metrics
    LLM_REQUESTS_TOTAL,
    LLM_LATENCY,
    # Helpers
    track_llm_request,
    track_classification,
    track_escalation_started,
    track_escalation_finished,
    track_location_resolution,
    track_alert_composed,
    track_delivery_attempt,
    track_delivery_abandoned,
    set_background_tasks,
    update_system_info,
    # Router
    metrics_router,
)

__all__ = [
    "MESSAGES_CLASSIFIED_TOTAL",
    "CLASSIFICATION_LATENCY",
    "ESCALATIONS_STARTED_TOTAL",
    "ESCALATIONS_FINISHED_TOTAL",
    "LOCATION_RESOLUTIONS_TOTAL",
    "ALERTS_COMPOSED_TOTAL",
    "BACKGROUND_TASKS_IN_FLIGHT",
    "DELIVERY_ATTEMPTS_TOTAL",
    "DELIVERIES_ABANDONED_TOTAL",
    "LLM_REQUESTS_TOTAL",
    "LLM_LATENCY",
    "track_llm_request",
    "track_classification",
    "track_escalation_started",
    "track_escalation_finished",
    "track_location_resolution",
    "track_alert_composed",
    "track_delivery_attempt",
    "track_delivery_abandoned",
    "set_background_tasks",
    "update_system_info",
    "metrics_router",
]
