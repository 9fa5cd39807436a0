# passwatch/app/services/email.py
"""
Outbound email through the Resend API.

- Delivery is a single attempt; there are no retries and no receipts
- Sending is disabled (and logged) when RESEND_API_KEY is not configured
- Transport errors surface as NotificationDeliveryFailure; callers on the
  login path catch it, nothing else should have to
"""
import asyncio
import logging
from datetime import datetime
from html import escape
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from passwatch.app.core.config import settings
from passwatch.app.core.errors import NotificationDeliveryFailure

logger = logging.getLogger(__name__)

UNKNOWN_DEVICE = "Unknown device"


class EmailService:
    """Sends HTML email via Resend."""

    def __init__(self, api_key: Optional[str] = None, sender: Optional[str] = None):
        self._api_key = api_key if api_key is not None else settings.RESEND_API_KEY
        self._sender = sender or settings.MAIL_FROM
        self._client = None

    @property
    def enabled(self) -> bool:
        return bool(self._api_key and self._api_key.strip())

    @property
    def client(self):
        """Lazy-load the Resend module and set its API key."""
        if self._client is None and self.enabled:
            import resend
            resend.api_key = self._api_key
            self._client = resend
        return self._client

    async def send(self, to_email: str, subject: str, html_body: str) -> bool:
        """
        Hand one email to the transport.

        Returns:
            True if the transport accepted the call, False if email is disabled

        Raises:
            NotificationDeliveryFailure: if the transport call raised
        """
        if not self.enabled:
            logger.warning(
                f"Email sending disabled (RESEND_API_KEY not configured). "
                f"'{subject}' for {to_email} not sent.",
                extra={"event": "email_disabled", "to_email": to_email},
            )
            return False

        params = {
            "from": self._sender,
            "to": [to_email],
            "subject": subject,
            "html": html_body,
        }
        try:
            # The Resend SDK is synchronous; keep it off the event loop
            await asyncio.to_thread(self.client.Emails.send, params)
        except Exception as e:
            raise NotificationDeliveryFailure(to_email, e) from e

        logger.info(
            "Email sent",
            extra={"event": "email_sent", "to_email": to_email, "subject": subject},
        )
        return True


def format_local_time(when: datetime, tz_name: Optional[str] = None) -> str:
    """Render a timestamp in the configured notification timezone (dd/mm/YYYY, HH:MM:SS)."""
    local = when.astimezone(ZoneInfo(tz_name or settings.NOTIFICATION_TIMEZONE))
    return local.strftime("%d/%m/%Y, %H:%M:%S")


def render_new_login_alert(
    user_name: str,
    ip_address: str,
    device_info: Optional[str],
    when: datetime,
) -> Tuple[str, str]:
    """Build (subject, html) for the login-from-untrusted-IP alert."""
    subject = f"Security alert: new sign-in to your {settings.PROJECT_NAME} account"
    html_content = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; border: 1px solid #ddd; border-radius: 10px;">
        <h2 style="color: #F44336; text-align: center;">Security alert</h2>
        <p>Hi {escape(user_name)},</p>
        <p>We detected a sign-in to your account from the following IP address:</p>
        <div style="background-color: #f5f5f5; padding: 15px; border-radius: 5px; margin: 15px 0;">
            <p><strong>IP address:</strong> {escape(ip_address)}</p>
            <p><strong>Device:</strong> {escape(device_info or UNKNOWN_DEVICE)}</p>
            <p><strong>Date and time:</strong> {format_local_time(when)}</p>
        </div>
        <p>If this was you, open the Security menu and mark this IP as trusted to stop receiving these alerts.</p>
        <p style="color: #F44336; font-weight: bold;">If you do not recognise this sign-in, change your password immediately.</p>
        <div style="text-align: center; margin-top: 20px; padding-top: 20px; border-top: 1px solid #eee;">
            <p style="color: #777; font-size: 12px;">This is an automated security message. Please do not reply.</p>
        </div>
    </div>
    """
    return subject, html_content
