import html
import logging
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from contact_api.config import Settings
from contact_api.schemas import Submission
from contact_api.sinks import ContactSink
from contact_api.validation import is_valid_email

LOG = logging.getLogger("contact_api.email")

ACCENT = "#e8b347"


def build_subject(sub: Submission, prefix: str) -> str:
    return f"{prefix} {sub.subject} – {sub.name}"


def reply_to_for(sub: Submission, fallback: str) -> str:
    return sub.email if is_valid_email(sub.email) else fallback


def _row(label: str, value_html: str) -> str:
    return (
        '<tr style="border-bottom: 1px solid #eee;">'
        f'<td style="padding: 8px 0; font-weight: bold; color: #555; width: 140px;">{label}:</td>'
        f'<td style="padding: 8px 0; color: #333;">{value_html}</td>'
        "</tr>"
    )


def _photo_block(urls: List[str]) -> str:
    if not urls:
        return ""
    items = "".join(
        f'<a href="{html.escape(u, quote=True)}"><img src="{html.escape(u, quote=True)}" '
        f'alt="Damage photo {i}" style="max-width: 160px; margin: 4px; border-radius: 4px;"></a>'
        for i, u in enumerate(urls, start=1)
    )
    return (
        '<h3 style="color: #333; margin: 25px 0 10px 0;">Photos:</h3>'
        f'<div style="margin: 10px 0;">{items}</div>'
    )


def render_html(sub: Submission) -> str:
    e = html.escape
    rows = [_row("Name", e(sub.name))]
    if sub.email:
        rows.append(_row("Email", f'<a href="mailto:{e(sub.email, quote=True)}" style="color: {ACCENT}; text-decoration: none;">{e(sub.email)}</a>'))
    if sub.phone:
        rows.append(_row("Phone", f'<a href="tel:{e(sub.phone, quote=True)}" style="color: {ACCENT}; text-decoration: none;">{e(sub.phone)}</a>'))
    rows.append(_row("Service", e(sub.subject)))
    for _key, label, value in sub.present_extras():
        rows.append(_row(label, e(value)))

    rows_html = "".join(rows)
    message_html = e(sub.message).replace("\n", "<br>")

    return f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <div style="background: linear-gradient(135deg, #f6e197 0%, {ACCENT} 100%); padding: 20px; text-align: center;">
    <h1 style="color: white; margin: 0;">New Website Contact</h1>
  </div>
  <div style="padding: 30px; background: #f9f9f9;">
    <div style="background: white; padding: 25px; border-radius: 8px;">
      <h2 style="color: #333; margin-top: 0; border-bottom: 2px solid {ACCENT}; padding-bottom: 10px;">Contact Details</h2>
      <table style="width: 100%; border-collapse: collapse; margin: 20px 0;">{rows_html}</table>
      <h3 style="color: #333; margin: 25px 0 10px 0;">Message:</h3>
      <div style="background: #f8f8f8; padding: 15px; border-left: 4px solid {ACCENT}; border-radius: 4px;">
        <p style="margin: 0; line-height: 1.6; color: #333;">{message_html}</p>
      </div>
      {_photo_block(sub.photo_urls)}
    </div>
    <div style="background: white; padding: 20px; border-radius: 8px; margin-top: 20px;">
      <h3 style="color: #666; margin-top: 0; font-size: 14px;">Submission Details</h3>
      <p style="margin: 5px 0; font-size: 12px; color: #888;">
        <strong>Time:</strong> {e(sub.timestamp)}<br>
        <strong>Source:</strong> {e(sub.source)}<br>
        <strong>IP:</strong> {e(sub.ip)}<br>
        <strong>User Agent:</strong> {e(sub.user_agent)}
      </p>
    </div>
  </div>
  <div style="background: #333; color: white; padding: 20px; text-align: center;">
    <p style="margin: 0; font-size: 14px;">Reply to this email to respond directly to the customer</p>
  </div>
</div>"""


def render_text(sub: Submission) -> str:
    lines = [
        f"NEW WEBSITE CONTACT - {sub.subject}",
        "",
        "CONTACT DETAILS:",
        f"Name: {sub.name}",
    ]
    if sub.email:
        lines.append(f"Email: {sub.email}")
    if sub.phone:
        lines.append(f"Phone: {sub.phone}")
    lines.append(f"Service: {sub.subject}")
    lines += [f"{label}: {value}" for _key, label, value in sub.present_extras()]
    lines += ["", "MESSAGE:", sub.message]
    if sub.photo_urls:
        lines += ["", "PHOTOS:"]
        # data URLs are unreadable in plain text
        lines += [f"- {u}" if not u.startswith("data:") else f"- [inline image {i}]"
                  for i, u in enumerate(sub.photo_urls, start=1)]
    lines += [
        "",
        "---",
        "Submission Details:",
        f"Time: {sub.timestamp}",
        f"Source: {sub.source}",
        f"IP: {sub.ip}",
    ]
    return "\n".join(lines)


class SesEmailSink(ContactSink):
    name = "email"
    unavailable_message = "Email service is not configured. Please contact us directly."

    def __init__(self, settings: Settings, client=None):
        self.settings = settings
        self._ses = client

    @property
    def configured(self) -> bool:
        return self.settings.email_configured

    def _client(self):
        if self._ses is None:
            self._ses = boto3.client("ses", region_name=self.settings.SES_REGION)
        return self._ses

    def deliver(self, submission: Submission) -> bool:
        s = self.settings
        if not self.configured:
            LOG.error("MAIL_SENDER not set; contact email not sent")
            return False
        try:
            resp = self._client().send_email(
                Source=f"{s.MAIL_SENDER_NAME} <{s.MAIL_SENDER}>",
                Destination={"ToAddresses": [s.MAIL_RECIPIENT]},
                Message={
                    "Subject": {"Data": build_subject(submission, s.MAIL_SUBJECT_PREFIX), "Charset": "UTF-8"},
                    "Body": {
                        "Html": {"Data": render_html(submission), "Charset": "UTF-8"},
                        "Text": {"Data": render_text(submission), "Charset": "UTF-8"},
                    },
                },
                ReplyToAddresses=[reply_to_for(submission, s.MAIL_FALLBACK_REPLY_TO)],
            )
        except ClientError as e:
            LOG.error("SES send failed: %s", e.response.get("Error", {}).get("Message"))
            return False
        except BotoCoreError as e:
            LOG.error("SES unavailable: %s", e)
            return False
        except Exception:
            LOG.exception("Unexpected error sending contact email")
            return False
        message_id: Optional[str] = (resp or {}).get("MessageId")
        LOG.info("Contact email sent for %s (%s)", submission.name, message_id)
        return True
