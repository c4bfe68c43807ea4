"""
Unit Tests for Crisis Orchestrator

Non-blocking hand-off, escalation threshold and the degraded paths
of the background flow.
"""

from havyn.domain.enums.crisis_severity import CrisisSeverity, EscalationState
from havyn.domain.models.geo import GeoPoint
from havyn.domain.models.risk_verdict import RiskVerdict
from havyn.domain.models.user_account import UserAccount

from tests.fakes import DEFAULT_HELPLINE, DeniedSensor, FixedSensor


HIGH = RiskVerdict(is_crisis=True, severity=CrisisSeverity.HIGH, matched_signals=("want to die",))


class TestHandleMessage:

    async def test_crisis_message_hands_off_without_waiting(
        self, orchestrator, supervisor, email_client
    ):
        screening = orchestrator.handle_message("user-1", "I want to die")

        assert screening.verdict.severity == CrisisSeverity.HIGH
        assert screening.escalated is True
        assert screening.reply is not None
        assert supervisor.pending_count == 1
        assert email_client.calls == []

        await supervisor.drain()

        assert email_client.sent_to() == ["guardian@example.com"]

    async def test_medium_escalates(self, orchestrator, supervisor, email_client):
        screening = orchestrator.handle_message("user-1", "I feel worthless")
        await supervisor.drain()

        assert screening.verdict.severity == CrisisSeverity.MEDIUM
        assert screening.escalated is True
        assert len(email_client.sent) == 1

    async def test_low_does_not_escalate(self, orchestrator, supervisor, email_client):
        """LOW earns a softer reply, never an alert."""
        screening = orchestrator.handle_message("user-1", "I feel so alone")

        assert screening.verdict.severity == CrisisSeverity.LOW
        assert screening.escalated is False
        assert screening.reply is not None
        assert supervisor.pending_count == 0
        assert email_client.calls == []

    async def test_safe_message_does_nothing(self, orchestrator, supervisor, email_client):
        screening = orchestrator.handle_message("user-1", "Hi, how are you?")

        assert screening.verdict.severity == CrisisSeverity.NONE
        assert screening.escalated is False
        assert screening.reply is None
        assert supervisor.pending_count == 0
        assert email_client.calls == []

    async def test_to_dict(self, orchestrator, supervisor):
        screening = orchestrator.handle_message("user-1", "Hi")

        assert screening.to_dict() == {
            "is_crisis": False,
            "severity": "none",
            "matched_signals": [],
            "escalated": False,
        }

    async def test_closed_supervisor_does_not_fail_request(self, orchestrator, supervisor):
        await supervisor.shutdown(timeout=0.1)

        screening = orchestrator.handle_message("user-1", "I want to die")

        assert screening.verdict.is_crisis is True
        assert screening.escalated is False


class TestTriggerAlert:

    async def test_acknowledges_immediately(self, orchestrator, supervisor, email_client):
        ack = orchestrator.trigger_alert("user-1", "I want to die")

        assert ack.status == "processing"
        assert ack.escalated is True
        assert email_client.calls == []

        await supervisor.drain()
        assert email_client.sent_to() == ["guardian@example.com"]

    async def test_escalates_without_keyword_match(self, orchestrator, supervisor, email_client):
        """An explicit trigger is a crisis even if the snippet is not flagged."""
        ack = orchestrator.trigger_alert("user-1", "please help")
        await supervisor.drain()

        assert ack.escalated is True
        assert len(email_client.sent) == 1

    async def test_forced_high_drops_lower_tier_signals(self, orchestrator, supervisor, monkeypatch):
        verdicts = []

        async def record(user_id, message, verdict, sensor=None):
            verdicts.append(verdict)

        monkeypatch.setattr(orchestrator, "escalate", record)

        orchestrator.trigger_alert("user-1", "I feel so alone")
        await supervisor.drain()

        assert verdicts[0].severity == CrisisSeverity.HIGH
        assert verdicts[0].matched_signals == ()

    async def test_keyword_verdict_kept(self, orchestrator, supervisor, monkeypatch):
        verdicts = []

        async def record(user_id, message, verdict, sensor=None):
            verdicts.append(verdict)

        monkeypatch.setattr(orchestrator, "escalate", record)

        orchestrator.trigger_alert("user-1", "I want to die")
        await supervisor.drain()

        assert verdicts[0].severity == CrisisSeverity.HIGH
        assert verdicts[0].matched_signals == ("want to die",)


class TestEscalate:

    async def test_done_with_live_location(self, orchestrator, supervisor, email_client, store):
        point = GeoPoint(lat=19.076, lng=72.8777)

        state = await orchestrator.escalate("user-1", "I want to die", HIGH, FixedSensor(point))
        await supervisor.drain()

        assert state == EscalationState.DONE
        assert "https://www.google.com/maps?q=19.076,72.8777" in email_client.sent[0].html
        assert store.location_writes[0][1] == point

    async def test_lookup_by_email(self, orchestrator, supervisor, email_client):
        state = await orchestrator.escalate("asha@example.com", "I want to die", HIGH)
        await supervisor.drain()

        assert state == EscalationState.DONE
        assert email_client.sent_to() == ["guardian@example.com"]

    async def test_missing_user_aborts_silently(self, orchestrator, supervisor, email_client):
        state = await orchestrator.escalate("ghost", "I want to die", HIGH)
        await supervisor.drain()

        assert state == EscalationState.ABORTED
        assert email_client.calls == []

    async def test_store_failure_aborts(self, orchestrator, store, email_client):
        store.fail_reads = True

        state = await orchestrator.escalate("user-1", "I want to die", HIGH)

        assert state == EscalationState.ABORTED
        assert email_client.calls == []

    async def test_no_recipients_still_done(self, orchestrator, supervisor, store, email_client):
        """Guardian is the user's own address: composed, nothing sent."""
        store.add(UserAccount(
            user_id="user-2",
            email="self@example.com",
            guardian_email="SELF@example.com",
        ))

        state = await orchestrator.escalate("user-2", "I want to die", HIGH, DeniedSensor())
        await supervisor.drain()

        assert state == EscalationState.DONE
        assert email_client.calls == []

    async def test_unexpected_error_is_swallowed(self, orchestrator, monkeypatch):
        def broken_compose(**kwargs):
            raise KeyError("template")

        monkeypatch.setattr(orchestrator._composer, "compose", broken_compose)

        state = await orchestrator.escalate("user-1", "I want to die", HIGH)

        assert state == EscalationState.ABORTED

    async def test_concurrent_incidents_deliver_independently(
        self, orchestrator, supervisor, email_client
    ):
        """No deduplication across incidents."""
        orchestrator.handle_message("user-1", "I want to die")
        orchestrator.handle_message("user-1", "I want to die")
        await supervisor.drain()

        assert email_client.sent_to() == ["guardian@example.com", "guardian@example.com"]

    async def test_helpline_fallback(self, orchestrator, supervisor, store, email_client):
        store.add(UserAccount(user_id="user-3", email="lone@example.com"))

        state = await orchestrator.escalate("user-3", "I want to die", HIGH)
        await supervisor.drain()

        assert state == EscalationState.DONE
        assert email_client.sent_to() == [DEFAULT_HELPLINE]
        assert "no guardian configured" in email_client.sent[0].html
