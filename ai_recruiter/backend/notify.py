"""
Notification email sent when an analysis run starts.
SMTP settings come from the environment (see settings.py).
"""
import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import make_msgid

from .. import settings

logger = logging.getLogger(__name__)

HTML_TEMPLATE = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #1a73e8;">Resume Analysis Notification</h2>
  <p>Hello,</p>
  <p>A new resume analysis has been initiated through the AI Recruiter system.</p>
  <div style="background-color: #f8f9fa; padding: 15px; border-radius: 5px; margin: 20px 0;">
    <p style="margin: 0; font-size: 16px;"><strong>Number of Resumes Triggered:</strong>
    <span style="color: #1a73e8; font-size: 18px;">{resume_count}</span></p>
  </div>
  <p>This is an automated notification from the AI Recruiter system.</p>
  <hr style="border: none; border-top: 1px solid #eee; margin: 20px 0;">
  <p style="color: #666; font-size: 12px;">This email was sent automatically. Please do not reply to this email.</p>
</div>
"""

TEXT_TEMPLATE = """
Resume Analysis Notification

Hello,

A new resume analysis has been initiated through the AI Recruiter system.

Number of Resumes Triggered: {resume_count}

This is an automated notification from the AI Recruiter system.
"""


def build_message(resume_count: int) -> EmailMessage:
    msg = EmailMessage()
    msg["Subject"] = f"Resume Analysis Started - {resume_count} Resume(s) Processed"
    msg["From"] = settings.SENDER_EMAIL
    msg["To"] = settings.RECIPIENT_EMAIL
    msg["Message-ID"] = make_msgid(domain="ai-recruiter")
    msg.set_content(TEXT_TEMPLATE.format(resume_count=resume_count))
    msg.add_alternative(HTML_TEMPLATE.format(resume_count=resume_count), subtype="html")
    return msg


def send_analysis_notification(resume_count: int) -> str:
    """Sends the notification and returns its Message-ID. SMTP errors propagate."""
    if not settings.RECIPIENT_EMAIL:
        raise ValueError("RECIPIENT_EMAIL is not configured")
    msg = build_message(resume_count)

    logger.info(
        "SMTP config: host=%s port=%s ssl=%s tls=%s username=%s",
        settings.SMTP_SERVER, settings.SMTP_PORT, settings.SMTP_USE_SSL,
        settings.SMTP_USE_TLS, settings.SMTP_USERNAME,
    )
    if settings.SMTP_USE_SSL:
        server = smtplib.SMTP_SSL(settings.SMTP_SERVER, settings.SMTP_PORT, timeout=20,
                                  context=ssl.create_default_context())
    else:
        server = smtplib.SMTP(settings.SMTP_SERVER, settings.SMTP_PORT, timeout=20)
    with server:
        if settings.SMTP_USE_TLS and not settings.SMTP_USE_SSL:
            server.starttls(context=ssl.create_default_context())
        if settings.SMTP_USERNAME:
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
        server.send_message(msg)

    logger.info("Email sent successfully: %s", msg["Message-ID"])
    return msg["Message-ID"]
