"""SMTP delivery for reminder digests."""

from __future__ import annotations

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from deadline_tracker.config import Config, ConfigError, MailerError

logger = logging.getLogger(__name__)


def build_message(sender: str, recipient: str, subject: str, html_body: str) -> MIMEMultipart:
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = recipient
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    return msg


def send_html_email(recipient: str, subject: str, html_body: str, config=Config) -> None:
    """Send an HTML email over STARTTLS using the configured account."""
    try:
        config.validate()
    except ConfigError as exc:
        raise MailerError(str(exc), recipient=recipient) from exc

    sender = config.sender()
    msg = build_message(sender, recipient, subject, html_body)

    logger.info(f"Connecting to SMTP ({config.SMTP_HOST}:{config.SMTP_PORT})")
    try:
        with smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=config.SMTP_TIMEOUT) as server:
            server.ehlo()
            server.starttls()
            server.ehlo()
            server.login(config.EMAIL_USER, config.EMAIL_PASS)
            server.sendmail(sender, [recipient], msg.as_string())
    except (smtplib.SMTPException, OSError) as exc:
        raise MailerError(f"Failed to send reminder to {recipient}: {exc}", recipient=recipient) from exc
    logger.info(f"Email sent successfully to {recipient}")
