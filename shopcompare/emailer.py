# shopcompare/emailer.py
import os
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from .logger import get_logger

logger = get_logger(__name__)

EMAIL_FROM = os.getenv("EMAIL_FROM", "").strip()
SMTP_HOST = os.getenv("SMTP_HOST", "").strip()
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "").strip()
SMTP_PASS = os.getenv("SMTP_PASS", "").strip()
SMTP_USE_SSL = os.getenv("SMTP_USE_SSL", "false").lower() == "true"


def is_configured() -> bool:
    return bool(EMAIL_FROM and SMTP_HOST)


def build_message(subject: str, html_body: str, text_body: str | None, recipient: str) -> MIMEMultipart:
    msg = MIMEMultipart("alternative")
    msg["From"] = EMAIL_FROM
    msg["To"] = recipient
    msg["Subject"] = subject

    if not text_body:
        text_body = "HTML capable email client required to view this digest."

    msg.attach(MIMEText(text_body, "plain", "utf-8"))
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    return msg


def send_email(subject: str, html_body: str, text_body: str | None, recipient: str) -> bool:
    """Returns True when the message was handed to the SMTP server."""
    if not recipient:
        logger.warning("No recipient for email '%s'; skipping send.", subject)
        return False

    if not is_configured():
        logger.warning(
            "Email not fully configured (EMAIL_FROM/SMTP_HOST); skipping email: %s",
            subject,
        )
        return False

    msg = build_message(subject, html_body, text_body, recipient)

    if SMTP_USE_SSL:
        server = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, timeout=30)
    else:
        server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30)

    try:
        if not SMTP_USE_SSL:
            server.starttls()
        if SMTP_USER:
            server.login(SMTP_USER, SMTP_PASS)
        server.sendmail(EMAIL_FROM, [recipient], msg.as_string())
        logger.info("Email sent to %s: %s", recipient, subject)
    finally:
        try:
            server.quit()
        except smtplib.SMTPException as e:
            logger.debug("SMTP quit failed: %s", e)
    return True
