"""
Email Service using SMTP or Resend
Booking emails are written in MJML and sent with a plain-text alternative
"""

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import parseaddr
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from . import config
from .email_templates import (
    admin_booking_alert_template,
    admin_booking_alert_text,
    booking_confirmation_template,
    booking_confirmation_text,
)

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """The configured transport refused or failed to send a message"""


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a dict with 'html' and 'errors' keys
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise EmailDeliveryError(f"Failed to compile MJML template: {str(e)}") from e


def send_via_smtp(
    to: list[str],
    subject: str,
    text_content: str,
    html_content: str,
    from_address: str,
) -> dict:
    """Send one message through the configured SMTP account"""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = from_address
    msg["To"] = ", ".join(to)
    msg.attach(MIMEText(text_content, "plain"))
    msg.attach(MIMEText(html_content, "html"))

    try:
        if config.SMTP_PORT == 465:
            context = ssl.create_default_context()
            server = smtplib.SMTP_SSL(config.SMTP_HOST, config.SMTP_PORT, context=context, timeout=30)
        else:
            server = smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=30)
            if config.SMTP_USE_TLS:
                server.starttls(context=ssl.create_default_context())

        try:
            if config.EMAIL_USER and config.EMAIL_PASS:
                server.login(config.EMAIL_USER, config.EMAIL_PASS)
            server.sendmail(parseaddr(from_address)[1], to, msg.as_string())
        finally:
            server.quit()
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"❌ SMTP send failed via {config.SMTP_HOST}: {e}")
        raise EmailDeliveryError(f"SMTP failed: {str(e)}") from e

    logger.info(f"✅ SMTP email sent successfully via {config.SMTP_HOST}")
    return {"transport": "smtp", "to": to}


def send_via_resend(
    to: list[str],
    subject: str,
    text_content: str,
    html_content: str,
    from_address: str,
) -> dict:
    if not config.RESEND_API_KEY:
        raise EmailDeliveryError("Email service not configured - RESEND_API_KEY missing")

    resend.api_key = config.RESEND_API_KEY
    try:
        response = resend.Emails.send(
            {
                "from": from_address,
                "to": to,
                "subject": subject,
                "html": html_content,
                "text": text_content,
            }
        )
    except Exception as e:
        logger.error(f"❌ Resend send error to {to}: {e}")
        raise EmailDeliveryError(f"Failed to send email: {str(e)}") from e

    logger.info(f"✅ Email sent successfully via Resend: {response}")
    return response


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    text_content: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through the configured transport

    Args:
        to: Recipient email(s)
        subject: Email subject line
        text_content: Plain-text body
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Raises:
        EmailDeliveryError: on any transport failure; nothing is retried
    """
    recipients = [to] if isinstance(to, str) else to
    if not any(recipients):
        raise EmailDeliveryError("No recipient address")

    sender = from_address or config.EMAIL_FROM_ADDRESS
    if not sender:
        raise EmailDeliveryError("No sender address configured (EMAIL_FROM_ADDRESS / EMAIL_USER)")

    html_content = compile_mjml_to_html(mjml_content)

    logger.info(f"📧 Sending '{subject}' via {config.EMAIL_TRANSPORT} to: {recipients}")
    if config.EMAIL_TRANSPORT == "resend":
        return send_via_resend(recipients, subject, text_content, html_content, sender)
    return send_via_smtp(recipients, subject, text_content, html_content, sender)


class BookingNotifier:
    """Customer confirmation and admin alert for a new booking"""

    def __init__(
        self,
        admin_email: Optional[str],
        payment_url: str,
        spreadsheet_url: Optional[str] = None,
    ):
        self.admin_email = admin_email
        self.payment_url = payment_url
        self.spreadsheet_url = spreadsheet_url

    async def send_customer_confirmation(self, booking: dict) -> dict:
        return await send_email(
            to=booking.get("email", ""),
            subject="Booking Confirmation",
            text_content=booking_confirmation_text(booking, self.payment_url),
            mjml_content=booking_confirmation_template(booking, self.payment_url),
        )

    async def send_admin_alert(self, booking: dict) -> dict:
        if not self.admin_email:
            raise EmailDeliveryError("ADMIN_EMAIL is not configured")
        return await send_email(
            to=self.admin_email,
            subject=f"New Booking - {booking.get('name', '')}",
            text_content=admin_booking_alert_text(booking, self.spreadsheet_url),
            mjml_content=admin_booking_alert_template(booking, self.spreadsheet_url),
        )
