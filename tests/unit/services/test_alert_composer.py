"""
Unit Tests for Alert Composer

Subject naming, verbatim snippet, location section and escaping.
"""

import pytest

from havyn.domain.enums.crisis_severity import CrisisSeverity
from havyn.domain.models.alert import RecipientSet
from havyn.domain.models.geo import GeoPoint
from havyn.domain.models.risk_verdict import RiskVerdict
from havyn.domain.models.user_account import UserAccount
from havyn.services.alerting.alert_composer import AlertComposer

from tests.fakes import DEFAULT_HELPLINE, FIXED_NOW


HIGH_VERDICT = RiskVerdict(
    is_crisis=True,
    severity=CrisisSeverity.HIGH,
    matched_signals=("kill myself",),
)
GUARDIAN = RecipientSet.build(["guardian@example.com"])
HELPLINE = RecipientSet.build([DEFAULT_HELPLINE], no_guardian_configured=True)


@pytest.fixture
def composer(branding):
    return AlertComposer(branding)


@pytest.fixture
def asha():
    return UserAccount(user_id="user-1", email="asha@example.com", display_name="Asha")


def compose(composer, user, snippet="I want to kill myself", location=None, recipients=GUARDIAN):
    return composer.compose(user, HIGH_VERDICT, snippet, location, recipients, FIXED_NOW)


class TestSubject:

    def test_uses_display_name(self, composer, asha):
        payload = compose(composer, asha)

        assert payload.subject == "[URGENT] Mental Health Crisis Alert - Asha"

    def test_falls_back_to_email(self, composer):
        payload = compose(composer, UserAccount(user_id="u", email="ravi@example.com"))

        assert payload.subject == "[URGENT] Mental Health Crisis Alert - ravi@example.com"

    def test_falls_back_to_unknown_user(self, composer):
        payload = compose(composer, UserAccount(user_id="u"))

        assert payload.subject == "[URGENT] Mental Health Crisis Alert - Unknown User"


class TestBody:

    def test_contains_banner_identity_and_timestamp(self, composer, asha):
        payload = compose(composer, asha)

        for body in (payload.body_html, payload.body_text):
            assert "CRITICAL MENTAL HEALTH CRISIS" in body
            assert "Immediate Attention Required" in body
            assert "Asha" in body
            assert "asha@example.com" in body
            assert "2024-05-17 22:30:00" in body

    def test_snippet_is_verbatim_and_untruncated(self, composer, asha):
        snippet = "I want to kill myself. " + "Nobody would notice. " * 200

        payload = compose(composer, asha, snippet=snippet)

        assert payload.crisis_snippet == snippet
        assert snippet in payload.body_text
        assert snippet in payload.body_html

    def test_user_text_is_html_escaped(self, composer):
        user = UserAccount(user_id="u", email="x@example.com", display_name="<b>Eve</b>")

        payload = compose(composer, user, snippet='<script>alert("x")</script> want to die')

        assert "<script>" not in payload.body_html
        assert "&lt;script&gt;" in payload.body_html
        assert "&lt;b&gt;Eve&lt;/b&gt;" in payload.body_html
        assert '<script>alert("x")</script>' in payload.body_text

    def test_helpline_number_always_listed(self, composer, asha):
        for location in (None, GeoPoint(lat=19.076, lng=72.8777)):
            payload = compose(composer, asha, location=location)

            assert "National Suicide Prevention Helpline (India): 14416" in payload.body_html
            assert "National Suicide Prevention Helpline (India): 14416" in payload.body_text

    def test_recommended_contact_action(self, composer, asha):
        payload = compose(composer, asha)

        assert "Contact Asha immediately at asha@example.com" in payload.body_text
        assert "contacting local emergency services" in payload.body_text

    def test_footer(self, composer, asha):
        payload = compose(composer, asha)

        assert "Automated crisis alert from Heavenly Safety System." in payload.body_html


class TestLocationSection:

    def test_with_location_renders_map_link(self, composer, asha):
        point = GeoPoint(lat=19.076, lng=72.8777)

        payload = compose(composer, asha, location=point)

        assert "https://www.google.com/maps?q=19.076,72.8777" in payload.body_html
        assert "Coordinates: 19.076, 72.8777" in payload.body_text
        assert "Location unavailable" not in payload.body_html
        assert "Use the location link above" in payload.body_text
        assert payload.has_location

    def test_without_location_renders_notice(self, composer, asha):
        payload = compose(composer, asha, location=None)

        assert "google.com/maps" not in payload.body_html
        assert "Location unavailable" in payload.body_html
        assert "Location unavailable" in payload.body_text
        assert "Use the location link above" not in payload.body_text
        assert not payload.has_location


class TestGuardianNote:

    def test_helpline_routing_is_noted(self, composer, asha):
        payload = compose(composer, asha, recipients=HELPLINE)

        assert "no guardian configured" in payload.body_html
        assert "no guardian configured" in payload.body_text

    def test_guardian_routing_has_no_note(self, composer, asha):
        payload = compose(composer, asha, recipients=GUARDIAN)

        assert "no guardian configured" not in payload.body_html


class TestPayloadMetadata:

    def test_carries_incident_fields(self, composer, asha):
        payload = compose(composer, asha, recipients=HELPLINE)

        assert payload.recipients == HELPLINE
        assert payload.triggered_at == FIXED_NOW
        assert payload.triggering_user_id == "user-1"
        assert payload.severity == CrisisSeverity.HIGH
        assert payload.matched_signals == ("kill myself",)

    def test_is_deterministic(self, composer, asha):
        assert compose(composer, asha) == compose(composer, asha)
