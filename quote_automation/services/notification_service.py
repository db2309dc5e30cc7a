"""
Notification Service — staff and client emails sent through the Gmail API.

Handles:
- New inquiry alert to the admin mailbox
- Reception confirmation to clients who chose email contact

Uses OAuth2 refresh-token credentials; the token itself is obtained
once, out of band, and provided through the environment.
"""

from __future__ import annotations

import base64
import html
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Any

from fastapi.concurrency import run_in_threadpool
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build

from quote_automation.config import Settings, get_settings
from quote_automation.models.enums import ContactMethod
from quote_automation.models.errors import NotificationError
from quote_automation.models.schemas import QuoteSubmission
from quote_automation.rules.pricing_rules import get_feature_label, hosting_summary
from quote_automation.rules.quote_settings import DEFAULT_SETTINGS, QuoteSettings

logger = logging.getLogger(__name__)

GMAIL_SCOPES = ["https://www.googleapis.com/auth/gmail.send"]
TOKEN_URI = "https://oauth2.googleapis.com/token"


class NotificationService:
    """Builds and sends notification emails."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._service: Any = None

    def is_configured(self) -> bool:
        s = self.settings
        return bool(s.google_client_id and s.google_client_secret and s.google_refresh_token)

    def _gmail(self) -> Any:
        if self._service is not None:
            return self._service
        if not self.is_configured():
            raise NotificationError(
                "Gmail OAuth2 credentials not configured. Set GOOGLE_CLIENT_ID, "
                "GOOGLE_CLIENT_SECRET, GOOGLE_REFRESH_TOKEN."
            )
        credentials = Credentials(
            token=None,
            refresh_token=self.settings.google_refresh_token,
            client_id=self.settings.google_client_id,
            client_secret=self.settings.google_client_secret,
            token_uri=TOKEN_URI,
            scopes=GMAIL_SCOPES,
        )
        self._service = build("gmail", "v1", credentials=credentials, cache_discovery=False)
        return self._service

    # ── Public API ───────────────────────────────────────

    async def notify_new_inquiry(
        self,
        inquiry: QuoteSubmission,
        quote_settings: QuoteSettings = DEFAULT_SETTINGS,
    ) -> None:
        """Admin alert, then a client confirmation when the client chose email."""
        await self.send(
            to=self.settings.admin_email,
            subject=f"[새 견적 문의] {inquiry.client_name} ({inquiry.quote_number})",
            html_body=self.render_admin_notification(inquiry, quote_settings),
        )
        logger.info(f"Admin notification sent for {inquiry.quote_number}")

        if inquiry.contact_method == ContactMethod.EMAIL and inquiry.client_email:
            await self.send(
                to=inquiry.client_email,
                subject=f"[{quote_settings.company_info.name}] 견적 문의가 접수되었습니다 #{inquiry.quote_number}",
                html_body=self.render_reception_confirmation(inquiry, quote_settings),
            )
            logger.info(f"Client confirmation sent for {inquiry.quote_number}")

    async def send(self, to: str, subject: str, html_body: str) -> str:
        """Send one HTML email and return the Gmail message id."""
        message = MIMEMultipart("alternative")
        message["Subject"] = subject
        message["From"] = formataddr((self.settings.mail_sender_name, self.settings.mail_sender))
        message["To"] = to
        message.attach(MIMEText(html_body, "html", "utf-8"))
        raw = base64.urlsafe_b64encode(message.as_bytes()).decode("ascii")

        def _send() -> dict[str, Any]:
            return self._gmail().users().messages().send(userId="me", body={"raw": raw}).execute()

        try:
            response = await run_in_threadpool(_send)
        except NotificationError:
            raise
        except Exception as e:
            raise NotificationError(f"Email to {to} failed: {e}") from e
        return response.get("id", "")

    # ── Templates ────────────────────────────────────────

    @staticmethod
    def render_admin_notification(inquiry: QuoteSubmission, quote_settings: QuoteSettings) -> str:
        hosting = hosting_summary(inquiry.server_option, inquiry.domain_option, quote_settings)
        features = ", ".join(get_feature_label(f) for f in inquiry.features) or "-"
        rows = [
            ("견적번호", inquiry.quote_number),
            ("고객명", inquiry.client_name),
            ("연락처", inquiry.contact),
            ("연락 방법", inquiry.contact_method.value),
            ("업종", inquiry.industry_custom or inquiry.industry or "-"),
            ("목적", inquiry.purpose or "-"),
            ("스크린 블록", str(inquiry.screen_blocks)),
            ("UI/UX 스타일", inquiry.uiux_style.value),
            ("기능", features),
            ("특이사항", ", ".join(inquiry.special_notes) or "-"),
            ("서버", hosting["server"]),
            ("도메인", hosting["domain"]),
            ("예상 금액", f"{inquiry.estimated_price_min:,}원 ~ {inquiry.estimated_price_max:,}원"),
        ]
        cells = "\n".join(
            '<tr><td style="padding: 12px; border: 1px solid #e5e7eb; background: #f9fafb; '
            f'font-weight: 600; width: 30%;">{html.escape(label)}</td>'
            f'<td style="padding: 12px; border: 1px solid #e5e7eb;">{html.escape(str(value))}</td></tr>'
            for label, value in rows
        )
        return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
      <h2 style="color: #1e3a8a; border-bottom: 2px solid #1e3a8a; padding-bottom: 8px;">새로운 견적 문의</h2>
      <table style="border-collapse: collapse; width: 100%; margin-top: 16px;">
{cells}
      </table>
    </div>
    """

    @staticmethod
    def render_reception_confirmation(inquiry: QuoteSubmission, quote_settings: QuoteSettings) -> str:
        company = quote_settings.company_info
        return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
      <h2 style="color: #1e3a8a;">안녕하세요, {html.escape(inquiry.client_name)}님</h2>
      <p style="line-height: 1.8; color: #374151;">
        견적 문의가 정상적으로 접수되었습니다. 담당자가 확인 후 연락드리겠습니다.<br>
        견적번호: <strong>{html.escape(inquiry.quote_number)}</strong>
      </p>
      <hr style="border: none; border-top: 1px solid #e5e7eb; margin: 24px 0;">
      <p style="color: #6b7280; font-size: 14px;">
        감사합니다.<br>
        <strong style="color: #1e3a8a;">{html.escape(company.name)}</strong><br>
        {html.escape(company.website)}
      </p>
    </div>
    """
