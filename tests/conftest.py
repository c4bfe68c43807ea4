"""Tests configuration and fixtures."""

import pytest

from havyn.domain.models.user_account import UserAccount
from havyn.services.alerting import (
    AlertBranding,
    AlertComposer,
    CrisisOrchestrator,
    DeliveryPipeline,
    LocationResolver,
    RecipientResolver,
    TaskSupervisor,
)
from havyn.services.safety.risk_classifier import RiskClassifier

from tests.fakes import (
    DEFAULT_HELPLINE,
    FIXED_NOW,
    FakeEmailClient,
    InMemoryUserAccountStore,
    RecordingSleep,
)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def branding() -> AlertBranding:
    return AlertBranding(
        helpline_name="National Suicide Prevention Helpline (India)",
        helpline_number="14416",
        maps_base_url="https://www.google.com/maps?q=",
        system_name="Heavenly Safety System",
    )


@pytest.fixture
def guardian_user() -> UserAccount:
    return UserAccount(
        user_id="user-1",
        email="asha@example.com",
        display_name="Asha",
        guardian_email="guardian@example.com",
    )


@pytest.fixture
def store(guardian_user) -> InMemoryUserAccountStore:
    return InMemoryUserAccountStore([guardian_user])


@pytest.fixture
def email_client() -> FakeEmailClient:
    return FakeEmailClient()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
async def supervisor():
    supervisor = TaskSupervisor()
    yield supervisor
    await supervisor.shutdown(timeout=1.0)


@pytest.fixture
def pipeline(email_client, supervisor, recording_sleep) -> DeliveryPipeline:
    return DeliveryPipeline(
        email_client,
        supervisor,
        sender="Heavenly Crisis Alert <alerts@resend.dev>",
        retry_delay_seconds=30.0,
        sleep=recording_sleep,
    )


@pytest.fixture
def orchestrator(store, pipeline, supervisor, branding) -> CrisisOrchestrator:
    return CrisisOrchestrator(
        store=store,
        classifier=RiskClassifier(),
        location_resolver=LocationResolver(store, timeout_seconds=0.05, clock=lambda: FIXED_NOW),
        recipient_resolver=RecipientResolver(store, default_helpline=DEFAULT_HELPLINE),
        composer=AlertComposer(branding),
        pipeline=pipeline,
        supervisor=supervisor,
        clock=lambda: FIXED_NOW,
    )
