import asyncio

import pytest

from app import config, email_service
from app.email_service import BookingNotifier, EmailDeliveryError
from app.email_templates import booking_confirmation_template


@pytest.fixture
def outbox(monkeypatch):
    """Capture outgoing messages instead of talking to SMTP"""
    sent = []

    def fake_send_via_smtp(to, subject, text_content, html_content, from_address):
        sent.append(
            {"to": to, "subject": subject, "text": text_content, "html": html_content, "from": from_address}
        )
        return {"transport": "smtp", "to": to}

    monkeypatch.setattr(config, "EMAIL_TRANSPORT", "smtp")
    monkeypatch.setattr(config, "EMAIL_FROM_ADDRESS", "AutoTrust Inspections <bookings@example.com>")
    monkeypatch.setattr(email_service, "compile_mjml_to_html", lambda mjml: mjml)
    monkeypatch.setattr(email_service, "send_via_smtp", fake_send_via_smtp)
    return sent


@pytest.fixture
def booking():
    return {
        "name": "Jane Doe",
        "email": "a@b.com",
        "vehicle": "2018 Toyota Corolla",
        "package_name": "Premium Inspection",
        "booking_reference": "AC12345678",
        "date": "2026-11-02",
        "city": "Springfield",
    }


def test_customer_confirmation(outbox, booking):
    notifier = BookingNotifier(admin_email="admin@example.com", payment_url="https://pay.example.com/x")

    asyncio.run(notifier.send_customer_confirmation(booking))

    message = outbox[0]
    assert message["to"] == ["a@b.com"]
    assert message["subject"] == "Booking Confirmation"
    assert message["from"] == "AutoTrust Inspections <bookings@example.com>"
    for body in (message["text"], message["html"]):
        assert "Jane Doe" in body
        assert "2018 Toyota Corolla" in body
        assert "https://pay.example.com/x" in body


def test_admin_alert(outbox, booking):
    notifier = BookingNotifier(
        admin_email="admin@example.com",
        payment_url="https://pay.example.com/x",
        spreadsheet_url="https://docs.google.com/spreadsheets/d/sheet-123",
    )

    asyncio.run(notifier.send_admin_alert(booking))

    message = outbox[0]
    assert message["to"] == ["admin@example.com"]
    assert message["subject"] == "New Booking - Jane Doe"
    assert "2018 Toyota Corolla" in message["text"]
    assert "AC12345678" in message["text"]
    assert "https://docs.google.com/spreadsheets/d/sheet-123" in message["text"]


def test_admin_alert_needs_an_address(outbox, booking):
    notifier = BookingNotifier(admin_email=None, payment_url="https://pay.example.com/x")

    with pytest.raises(EmailDeliveryError):
        asyncio.run(notifier.send_admin_alert(booking))
    assert outbox == []


def test_customer_without_email_is_an_error(outbox, booking):
    booking["email"] = ""
    notifier = BookingNotifier(admin_email="admin@example.com", payment_url="https://pay.example.com/x")

    with pytest.raises(EmailDeliveryError, match="recipient"):
        asyncio.run(notifier.send_customer_confirmation(booking))


def test_resend_without_api_key(monkeypatch, outbox, booking):
    monkeypatch.setattr(config, "EMAIL_TRANSPORT", "resend")
    monkeypatch.setattr(config, "RESEND_API_KEY", None)
    notifier = BookingNotifier(admin_email="admin@example.com", payment_url="https://pay.example.com/x")

    with pytest.raises(EmailDeliveryError, match="RESEND_API_KEY"):
        asyncio.run(notifier.send_customer_confirmation(booking))
    assert outbox == []


def test_smtp_failure_is_wrapped(monkeypatch):
    class RefusingSMTP:
        def __init__(self, *args, **kwargs):
            raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(email_service.smtplib, "SMTP", RefusingSMTP)
    monkeypatch.setattr(config, "SMTP_PORT", 587)

    with pytest.raises(EmailDeliveryError, match="SMTP failed"):
        email_service.send_via_smtp(["a@b.com"], "Subject", "text", "<p>html</p>", "bookings@example.com")


def test_template_escapes_customer_input(booking):
    booking["name"] = "<script>alert(1)</script>"

    mjml = booking_confirmation_template(booking, "https://pay.example.com/x")

    assert "<script>" not in mjml
    assert "&lt;script&gt;" in mjml
