"""
Contract Tracker — Email service (SMTP + STARTTLS).

Configure SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASSWORD and optionally
SMTP_FROM in .env. With no host set, sends are skipped.
"""

import logging
import re
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from contract_tracker.config import settings

logger = logging.getLogger(__name__)


async def send_email(to: str, subject: str, body_html: str) -> dict:
    """
    Send an email via the configured SMTP server.
    Returns {"success": True/False, "message": "..."}
    """
    if not settings.smtp_configured:
        logger.warning("SMTP not configured — skipping email send")
        return {"success": False, "message": "SMTP not configured. Set SMTP_HOST and SMTP_USER."}

    sender = settings.smtp_sender
    msg = MIMEMultipart("alternative")
    msg["From"] = sender
    msg["To"] = to
    msg["Subject"] = subject

    plain_text = body_html.replace("<br>", "\n").replace("<br/>", "\n")
    plain_text = re.sub(r"<[^>]+>", "", plain_text)

    msg.attach(MIMEText(plain_text, "plain"))
    msg.attach(MIMEText(body_html, "html"))

    try:
        if settings.smtp_port == 465:
            server = smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, timeout=15)
        else:
            server = smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=15)
        with server:
            if settings.smtp_port != 465:
                server.ehlo()
                server.starttls()
                server.ehlo()
            if settings.smtp_user and settings.smtp_password:
                server.login(settings.smtp_user, settings.smtp_password)
            server.sendmail(sender, [to], msg.as_string())

        logger.info(f"✅ Email sent to {to}: {subject}")
        return {"success": True, "message": f"Email sent to {to}"}

    except smtplib.SMTPAuthenticationError as e:
        logger.error(f"SMTP auth failed: {e}")
        return {"success": False, "message": "SMTP authentication failed."}
    except Exception as e:
        logger.error(f"Email send failed: {e}")
        return {"success": False, "message": f"Email failed: {e}"}


def _contract_rows(name: str, partner: str, expire_date: str) -> str:
    return f"""
      <ul style="color: #333; font-size: 15px; line-height: 1.8;">
        <li>Contract: <strong>{name}</strong></li>
        <li>Partner: {partner}</li>
        <li>Expires: {expire_date}</li>
      </ul>
    """


def build_expiry_reminder_email(
    owner_name: str, name: str, partner: str, expire_date: str, days_left: int,
) -> tuple[str, str]:
    """Reminder for a contract about to expire. Returns (subject, html_body)."""
    subject = f"[Contract reminder] {name} expires in {days_left} day(s)"
    html = f"""
    <div style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 600px; margin: 0 auto; padding: 32px 20px;">
      <h2 style="color: #111;">Contract expiry reminder</h2>
      <p>Hi {owner_name},</p>
      <p>The contract <strong>{name}</strong> expires in <strong>{days_left}</strong> day(s).</p>
      {_contract_rows(name, partner, expire_date)}
      <p>Please review it in time.</p>
    </div>
    """
    return subject, html


def build_overdue_email(
    owner_name: str, name: str, partner: str, expire_date: str, days_overdue: int,
) -> tuple[str, str]:
    """Alert for an expired contract nobody has processed. Returns (subject, html_body)."""
    subject = f"[Urgent] {name} expired {days_overdue} day(s) ago"
    html = f"""
    <div style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; max-width: 600px; margin: 0 auto; padding: 32px 20px;">
      <h2 style="color: #dc2626;">Contract expired</h2>
      <p>Hi {owner_name},</p>
      <p>The contract <strong>{name}</strong> expired <strong>{days_overdue}</strong> day(s) ago and is still unprocessed.</p>
      {_contract_rows(name, partner, expire_date)}
    </div>
    """
    return subject, html
