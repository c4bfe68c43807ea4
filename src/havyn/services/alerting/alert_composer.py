"""
Alert Composer

Formats one crisis alert (subject, HTML body, plain-text body) from
the user snapshot, the triggering message, the resolved location and
the recipient set.

SAFETY-CRITICAL: The crisis snippet is reproduced verbatim and never
truncated. Every user-supplied value is HTML-escaped.

CLINICAL_REVIEW_REQUIRED: Wording of the alert and its recommended
actions.
"""

import html
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from havyn.config import get_settings
from havyn.domain.models.alert import AlertPayload, RecipientSet
from havyn.domain.models.geo import GeoPoint
from havyn.domain.models.risk_verdict import RiskVerdict
from havyn.domain.models.user_account import UserAccount

SUBJECT_TEMPLATE = "[URGENT] Mental Health Crisis Alert - {name}"
BANNER_TITLE = "CRITICAL MENTAL HEALTH CRISIS"
BANNER_NOTICE = "Immediate Attention Required"
LOCATION_UNAVAILABLE = "Location unavailable (timeout or permission denied)"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S %Z"


@dataclass(frozen=True)
class AlertBranding:
    """Constants rendered into every alert."""

    helpline_name: str
    helpline_number: str
    maps_base_url: str
    system_name: str

    @classmethod
    def from_settings(cls) -> "AlertBranding":
        alert = get_settings().alert
        return cls(
            helpline_name=alert.national_helpline_name,
            helpline_number=alert.national_helpline_number,
            maps_base_url=alert.maps_base_url,
            system_name=alert.system_name,
        )


class AlertComposer:
    """
    Pure alert formatter. No I/O, no failure modes.

    Usage:
        composer = AlertComposer()
        payload = composer.compose(user, verdict, snippet, point, recipients, now)
    """

    def __init__(self, branding: Optional[AlertBranding] = None) -> None:
        self._branding = branding or AlertBranding.from_settings()

    def maps_link(self, location: GeoPoint) -> str:
        return f"{self._branding.maps_base_url}{location.lat},{location.lng}"

    def compose(
        self,
        user: UserAccount,
        verdict: RiskVerdict,
        crisis_snippet: str,
        location: Optional[GeoPoint],
        recipients: RecipientSet,
        now: datetime,
    ) -> AlertPayload:
        """
        Build the alert for one incident.

        Args:
            user: Triggering user's snapshot
            verdict: Classifier verdict for the message
            crisis_snippet: The triggering message, verbatim
            location: Resolved location or None
            recipients: Resolved recipients
            now: Incident timestamp

        Returns:
            Frozen AlertPayload
        """
        name = user.name_for_display
        snippet = crisis_snippet or ""

        return AlertPayload(
            subject=SUBJECT_TEMPLATE.format(name=name),
            body_html=self._render_html(user, name, snippet, location, recipients, now),
            body_text=self._render_text(user, name, snippet, location, recipients, now),
            recipients=recipients,
            crisis_snippet=snippet,
            location=location,
            triggered_at=now,
            triggering_user_id=user.user_id,
            severity=verdict.severity,
            matched_signals=verdict.matched_signals,
        )

    def _actions(self, user: UserAccount, name: str, location: Optional[GeoPoint]) -> list[str]:
        contact = user.email or "their registered contact"
        actions = [
            f"Contact {name} immediately at {contact}",
            "If unable to reach them, consider contacting local emergency services",
        ]
        if location is not None:
            actions.append("Use the location link above to provide exact coordinates")
        actions.append(f"{self._branding.helpline_name}: {self._branding.helpline_number}")
        return actions

    def _render_html(
        self,
        user: UserAccount,
        name: str,
        snippet: str,
        location: Optional[GeoPoint],
        recipients: RecipientSet,
        now: datetime,
    ) -> str:
        esc = html.escape
        email = esc(user.email or "")

        lines = [
            "<!DOCTYPE html>",
            "<html>",
            '<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #111;">',
            '<div style="max-width: 600px; margin: 0 auto;">',
            '<div style="background: #dc2626; color: #fff; padding: 24px; text-align: center;">',
            f'<h1 style="margin: 0;">{BANNER_TITLE}</h1>',
            "</div>",
            '<div style="border: 2px solid #dc2626; padding: 16px; margin: 16px 0;">',
            f'<strong style="color: #dc2626;">{BANNER_NOTICE}</strong>',
            f"<p><strong>{email or esc(name)}</strong> may be in crisis and expressing "
            "thoughts of self-harm. Please help them immediately.</p>",
            "</div>",
            "<h2>User Information</h2>",
            "<ul>",
            f"<li><strong>Name:</strong> {esc(name)}</li>",
            f"<li><strong>Email:</strong> {email}</li>",
            f"<li><strong>Time:</strong> {esc(now.strftime(TIMESTAMP_FORMAT).strip())}</li>",
            "</ul>",
            '<div style="border-left: 4px solid #dc2626; padding: 12px; font-style: italic;">',
            "<strong>Crisis Message Detected:</strong>",
            f'<p style="white-space: pre-wrap;">"{esc(snippet)}"</p>',
            "</div>",
        ]

        if location is not None:
            link = esc(self.maps_link(location), quote=True)
            lines.extend([
                "<h2>Current Location</h2>",
                f'<p><a href="{link}">View Location on Google Maps</a></p>',
                f"<p>Coordinates: {location.lat}, {location.lng}</p>",
            ])
        else:
            lines.append(f"<p>{LOCATION_UNAVAILABLE}</p>")

        if recipients.no_guardian_configured:
            lines.append(
                "<p><em>This user has no guardian configured. "
                "This alert was routed to a crisis helpline.</em></p>"
            )

        lines.append("<h2>Recommended Actions</h2>")
        lines.append("<ol>")
        lines.extend(f"<li>{esc(action)}</li>" for action in self._actions(user, name, location))
        lines.append("</ol>")

        lines.extend([
            '<div style="font-size: 12px; color: #666; text-align: center; margin-top: 24px;">',
            f"<p>Automated crisis alert from {esc(self._branding.system_name)}.</p>",
            "<p>This person needs immediate support and intervention.</p>",
            "</div>",
            "</div>",
            "</body>",
            "</html>",
        ])
        return "\n".join(lines)

    def _render_text(
        self,
        user: UserAccount,
        name: str,
        snippet: str,
        location: Optional[GeoPoint],
        recipients: RecipientSet,
        now: datetime,
    ) -> str:
        lines = [
            BANNER_TITLE,
            BANNER_NOTICE,
            "",
            f"Name: {name}",
            f"Email: {user.email or ''}",
            f"Time: {now.strftime(TIMESTAMP_FORMAT).strip()}",
            "",
            "Crisis Message Detected:",
            f'"{snippet}"',
            "",
        ]

        if location is not None:
            lines.append(f"Location: {self.maps_link(location)}")
            lines.append(f"Coordinates: {location.lat}, {location.lng}")
        else:
            lines.append(LOCATION_UNAVAILABLE)

        if recipients.no_guardian_configured:
            lines.append("")
            lines.append(
                "This user has no guardian configured. "
                "This alert was routed to a crisis helpline."
            )

        lines.append("")
        lines.append("Recommended Actions:")
        lines.extend(
            f"{index}. {action}"
            for index, action in enumerate(self._actions(user, name, location), start=1)
        )
        lines.append("")
        lines.append(f"Automated crisis alert from {self._branding.system_name}.")
        return "\n".join(lines)
