"""
Service email - envoi via l'API HTTP de Resend
"""

import html
import logging
from datetime import datetime, timedelta
from typing import List, Optional

import requests

from taskmaster.core.config import settings
from taskmaster.core.errors import NotifierError

logger = logging.getLogger(__name__)


class ResendNotifier:
    """send(from, to[], subject, html, reply_to) -> id du message, ou NotifierError"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = settings.RESEND_API_KEY if api_key is None else api_key
        self.api_url = api_url or settings.RESEND_API_URL
        self.timeout = settings.EMAIL_TIMEOUT_SECONDS if timeout is None else timeout

    def send(
        self,
        from_address: str,
        to: List[str],
        subject: str,
        html_body: str,
        reply_to: Optional[str] = None,
    ) -> str:
        if not self.api_key:
            raise NotifierError("RESEND_API_KEY environment variable not set")

        payload = {"from": from_address, "to": list(to), "subject": subject, "html": html_body}
        if reply_to:
            payload["reply_to"] = reply_to

        try:
            response = requests.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NotifierError(f"failed to send email via Resend: {e}") from e

        if response.status_code >= 400:
            raise NotifierError(f"Resend error {response.status_code}: {response.text}")

        try:
            message_id = response.json().get("id", "")
        except ValueError:
            message_id = ""
        return message_id


# ============ RENDU ============

def format_duration(delta: timedelta) -> str:
    """
    Temps restant lisible.

    < 0        → "now"
    >= 1 heure → "H hour(s)" ou "H hour(s) and M minute(s)"
    sinon      → "M minute(s)"
    """
    total_seconds = delta.total_seconds()
    if total_seconds < 0:
        return "now"

    hours = int(total_seconds // 3600)
    minutes = int(total_seconds // 60) % 60

    if hours > 0:
        if minutes > 0:
            return f"{hours} hour(s) and {minutes} minute(s)"
        return f"{hours} hour(s)"
    return f"{minutes} minute(s)"


def format_scheduled_date(value: datetime) -> str:
    """Ex: "Monday, January 2, 2026 at 3:04 PM" """
    hour = value.hour % 12 or 12
    return f"{value:%A, %B} {value.day}, {value.year} at {hour}:{value:%M %p}"


def render_reminder_email(
    title: str,
    description: Optional[str],
    scheduled_date: str,
    time_remaining: str,
    app_url: str,
) -> str:
    description_html = ""
    if description:
        description_html = (
            '<p style="margin: 0 0 24px 0; font-size: 16px; line-height: 1.6; color: #a1a1aa;">'
            f"{html.escape(description)}</p>"
        )

    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="margin: 0; padding: 0; font-family: Arial, sans-serif; background-color: #0a0a0f; color: #ffffff;">
  <div style="max-width: 600px; margin: 0 auto; background: #1a1a24; border-radius: 16px; overflow: hidden;">
    <div style="background: #6366f1; padding: 32px; text-align: center;">
      <h1 style="margin: 0; font-size: 28px;">⏰ Task Reminder</h1>
    </div>
    <div style="padding: 40px 32px;">
      <h2 style="margin: 0 0 16px 0; font-size: 24px;">{html.escape(title)}</h2>
      {description_html}
      <div style="background: rgba(99, 102, 241, 0.1); border-left: 4px solid #6366f1; padding: 16px; border-radius: 8px;">
        <p style="margin: 0; font-size: 14px;"><strong>Scheduled for:</strong><br>{html.escape(scheduled_date)}</p>
        <p style="margin: 12px 0 0 0; font-size: 14px;"><strong>Time remaining:</strong><br>{html.escape(time_remaining)}</p>
      </div>
      <p style="margin: 24px 0 0 0; font-size: 14px; color: #71717a;">
        This is a friendly reminder about your upcoming task. Make sure you're prepared!
      </p>
    </div>
    <div style="padding: 0 32px 40px 32px; text-align: center;">
      <a href="{html.escape(app_url, quote=True)}" style="display: inline-block; background: #6366f1; color: #ffffff; text-decoration: none; padding: 14px 32px; border-radius: 8px;">View Task in TaskMaster</a>
    </div>
  </div>
</body>
</html>
"""


def render_contact_email(user_email: str, subject: str, message: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"></head>
<body style="font-family: Arial, sans-serif; background-color: #0a0a0f; color: #ffffff; padding: 20px;">
  <div style="max-width: 600px; margin: 0 auto; background: #1a1a24; border-radius: 12px; padding: 32px;">
    <h1 style="color: #6366f1;">📬 New Contact Message</h1>
    <p><strong>From:</strong><br>{html.escape(user_email)}</p>
    <p><strong>Subject:</strong><br>{html.escape(subject)}</p>
    <div style="padding: 16px; background: rgba(99, 102, 241, 0.1); border-radius: 8px; white-space: pre-wrap;">{html.escape(message)}</div>
    <p style="color: #71717a; font-size: 12px;">This message was sent via the TaskMaster contact form.</p>
  </div>
</body>
</html>
"""


def send_contact_notification(notifier, user_email: str, subject: str, message: str):
    """Notification admin du formulaire de contact. Lancée en tâche de fond: ne lève jamais."""
    if not settings.ADMIN_EMAIL:
        logger.info("ADMIN_EMAIL not set, skipping contact notification email")
        return None

    try:
        message_id = notifier.send(
            settings.FROM_EMAIL,
            [settings.ADMIN_EMAIL],
            f"📬 TaskMaster Contact: {subject}",
            render_contact_email(user_email, subject, message),
            reply_to=user_email,
        )
    except NotifierError as e:
        logger.warning(f"Failed to send contact notification email: {e}")
        return None

    logger.info(f"Contact notification sent to {settings.ADMIN_EMAIL} from {user_email}")
    return message_id


notifier = ResendNotifier()


def get_notifier():
    """Dépendance FastAPI, surchargée dans les tests"""
    return notifier
