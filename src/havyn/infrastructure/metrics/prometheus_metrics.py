"""
Prometheus Metrics

Counters and histograms for the crisis pipeline and the chat model,
scraped from /metrics.

SAFETY-CRITICAL: Alert code paths only increment and observe here.
A metrics call must never be the reason an alert is not sent.
"""

import time
from functools import wraps
from typing import Callable

from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    Info,
    generate_latest,
    CONTENT_TYPE_LATEST,
    REGISTRY,
)
from fastapi import APIRouter, Response

# =============================================================================
# CLASSIFICATION METRICS
# =============================================================================

MESSAGES_CLASSIFIED_TOTAL = Counter(
    "havyn_messages_classified_total",
    "Messages classified by severity tier",
    ["severity"],  # high, medium, low, none
)

CLASSIFICATION_LATENCY = Histogram(
    "havyn_classification_latency_seconds",
    "Time spent in the keyword classifier",
    buckets=[0.00001, 0.00005, 0.0001, 0.0005, 0.001, 0.005],
)

# =============================================================================
# ESCALATION METRICS
# =============================================================================

ESCALATIONS_STARTED_TOTAL = Counter(
    "havyn_escalations_started_total",
    "Background escalations handed off",
    ["severity"],
)

ESCALATIONS_FINISHED_TOTAL = Counter(
    "havyn_escalations_finished_total",
    "Background escalations finished by terminal state",
    ["state"],  # done, aborted
)

LOCATION_RESOLUTIONS_TOTAL = Counter(
    "havyn_location_resolutions_total",
    "Location resolutions by source",
    ["source"],  # live, cached, none
)

ALERTS_COMPOSED_TOTAL = Counter(
    "havyn_alerts_composed_total",
    "Crisis alerts composed by primary target",
    ["target"],  # guardian, helpline
)

BACKGROUND_TASKS_IN_FLIGHT = Gauge(
    "havyn_background_tasks_in_flight",
    "Supervised background tasks currently running",
)

# =============================================================================
# DELIVERY METRICS
# =============================================================================

DELIVERY_ATTEMPTS_TOTAL = Counter(
    "havyn_alert_delivery_attempts_total",
    "Alert email attempts",
    ["attempt", "outcome"],  # attempt: 1, 2; outcome: sent, failed
)

DELIVERIES_ABANDONED_TOTAL = Counter(
    "havyn_alert_deliveries_abandoned_total",
    "Recipients abandoned after the retry also failed",
)

# =============================================================================
# CHAT MODEL METRICS
# =============================================================================

LLM_REQUESTS_TOTAL = Counter(
    "havyn_llm_requests_total",
    "Chat model calls by outcome",
    ["provider", "status"],  # success, rate_limited, error
)

LLM_LATENCY = Histogram(
    "havyn_llm_latency_seconds",
    "Chat model call latency",
    ["provider"],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)

SYSTEM_INFO = Info("havyn_build", "Deployed version and environment")


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def track_llm_request(provider: str) -> Callable:
    """
    Decorator counting and timing calls to a chat model.

    Exceptions with a retry_after_seconds attribute count as
    rate limited.
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            started = time.perf_counter()
            status = "error"
            try:
                result = await func(*args, **kwargs)
                status = "success"
                return result
            except Exception as e:
                if hasattr(e, "retry_after_seconds"):
                    status = "rate_limited"
                raise
            finally:
                LLM_REQUESTS_TOTAL.labels(provider=provider, status=status).inc()
                LLM_LATENCY.labels(provider=provider).observe(time.perf_counter() - started)
        return wrapper
    return decorator


def track_classification(severity: str, duration_seconds: float) -> None:
    """Record a classifier verdict."""
    MESSAGES_CLASSIFIED_TOTAL.labels(severity=severity).inc()
    CLASSIFICATION_LATENCY.observe(duration_seconds)


def track_escalation_started(severity: str) -> None:
    ESCALATIONS_STARTED_TOTAL.labels(severity=severity).inc()


def track_escalation_finished(state: str) -> None:
    ESCALATIONS_FINISHED_TOTAL.labels(state=state).inc()


def track_location_resolution(source: str) -> None:
    LOCATION_RESOLUTIONS_TOTAL.labels(source=source).inc()


def track_alert_composed(no_guardian: bool) -> None:
    ALERTS_COMPOSED_TOTAL.labels(target="helpline" if no_guardian else "guardian").inc()


def track_delivery_attempt(attempt_number: int, outcome: str) -> None:
    DELIVERY_ATTEMPTS_TOTAL.labels(attempt=str(attempt_number), outcome=outcome).inc()


def track_delivery_abandoned() -> None:
    DELIVERIES_ABANDONED_TOTAL.inc()


def set_background_tasks(count: int) -> None:
    BACKGROUND_TASKS_IN_FLIGHT.set(count)


def update_system_info(environment: str, version: str) -> None:
    SYSTEM_INFO.info({"version": version, "environment": environment})


# =============================================================================
# METRICS ENDPOINT
# =============================================================================

metrics_router = APIRouter(tags=["metrics"])


@metrics_router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Prometheus text exposition of the default registry."""
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)
