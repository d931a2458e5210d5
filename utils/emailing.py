import smtplib
import uuid
from datetime import datetime
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.config import (
    APP_NAME, MAIL_FROM, RESEND_API_KEY, RESEND_API_URL,
    SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS, TEMPLATES_DIR, logger,
)
from core.errors import NotificationError

# Jinja env
_jinja_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html", "xml"]),
)


def render_email(template_name: str, **context) -> str:
    base = {"app_name": APP_NAME}
    base.update(context or {})
    return _jinja_env.get_template(template_name).render(**base)


def resend_configured() -> bool:
    return bool(RESEND_API_KEY)


def smtp_configured() -> bool:
    return bool(SMTP_HOST and SMTP_PASS and MAIL_FROM)


async def send_email_resend(to_addr: str, subject: str, html: str, text: Optional[str] = None, from_addr: Optional[str] = None) -> str:
    """Send through the Resend HTTP API. Returns the provider message id."""
    payload = {
        "from": (from_addr or MAIL_FROM).strip(),
        "to": [to_addr],
        "subject": subject,
        "html": html,
    }
    if text:
        payload["text"] = text
    headers = {
        "Authorization": f"Bearer {RESEND_API_KEY}",
        "Content-Type": "application/json",
    }
    try:
        async with httpx.AsyncClient(timeout=15.0) as client:
            resp = await client.post(RESEND_API_URL, headers=headers, json=payload)
    except httpx.HTTPError as ex:
        raise NotificationError(f"Resend request failed: {ex}") from ex
    if resp.status_code >= 400:
        raise NotificationError(f"Resend rejected message: {resp.status_code} - {resp.text}")
    try:
        return str((resp.json() or {}).get("id") or "")
    except ValueError:
        return ""


def send_email_smtp(to_addr: str, subject: str, html: str, text: Optional[str] = None, from_addr: Optional[str] = None) -> None:
    """Blocking SMTP send; run it on a worker thread from async code."""
    sender = (from_addr or MAIL_FROM).strip()
    # Envelope sender is the bare address when MAIL_FROM carries a display name
    envelope = sender.split("<")[-1].rstrip(">").strip() if "<" in sender else sender
    domain = envelope.split("@")[-1] if "@" in envelope else "localhost"

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = to_addr
    msg["Message-ID"] = f"<{uuid.uuid4()}@{domain}>"
    msg["Date"] = datetime.utcnow().strftime("%a, %d %b %Y %H:%M:%S +0000")
    msg.attach(MIMEText(text or "", "plain", _charset="utf-8"))
    msg.attach(MIMEText(html or "", "html", _charset="utf-8"))

    try:
        with smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=15) as server:
            server.starttls()
            if SMTP_USER or SMTP_PASS:
                server.login(SMTP_USER, SMTP_PASS)
            server.sendmail(envelope, [to_addr], msg.as_string())
    except (smtplib.SMTPException, OSError) as ex:
        raise NotificationError(f"SMTP send failed: {ex}") from ex
    logger.info(f"[email] SMTP message sent to {to_addr}")
