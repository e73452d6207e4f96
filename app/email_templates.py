"""
MJML Email Templates
Booking emails in MJML for responsive rendering, with plain-text twins
"""

from html import escape
from typing import Optional

THEME = {
    "primary": "#2563eb",
    "primary_dark": "#1d4ed8",
    "primary_light": "#dbeafe",
    "background": "#f8fafc",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}

BRAND_NAME = "AutoTrust Inspections"


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{escape(cta_url)}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="{THEME['primary']}" padding="24px 20px">
          <mj-column>
            <mj-text align="center" font-size="22px" font-weight="700" color="#ffffff">
              {BRAND_NAME}
            </mj-text>
          </mj-column>
        </mj-section>

        <mj-section background-color="#ffffff" padding="32px 40px 40px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              © {BRAND_NAME}. All rights reserved.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _detail_rows(rows: list[tuple[str, str]]) -> str:
    cells = "".join(
        f"""
        <tr>
          <td style="padding: 6px 12px 6px 0; color: {THEME['text_muted']}; white-space: nowrap;">{escape(label)}</td>
          <td style="padding: 6px 0; color: {THEME['text_primary']};">{escape(value or "")}</td>
        </tr>"""
        for label, value in rows
    )
    return f"""
    <mj-table padding="0 0 16px 0" font-size="15px">
      {cells}
    </mj-table>
    """


def _text_rows(rows: list[tuple[str, str]]) -> str:
    return "\n".join(f"{label}: {value or ''}" for label, value in rows)


def _summary_rows(booking: dict) -> list[tuple[str, str]]:
    return [
        ("Package", booking.get("package_name", "")),
        ("Vehicle", booking.get("vehicle", "")),
        ("Inspection date", booking.get("date", "")),
        ("Time preference", booking.get("timePreference", "")),
        (
            "Location",
            ", ".join(
                part
                for part in (
                    booking.get("address", ""),
                    booking.get("city", ""),
                    booking.get("state", ""),
                    booking.get("zipCode", ""),
                )
                if part
            ),
        ),
    ]


def booking_confirmation_template(booking: dict, payment_url: str) -> str:
    """Customer-facing confirmation"""
    name = escape(booking.get("name", ""))
    content = f"""
    <mj-text padding="0 0 16px 0">
      Hi {name}, thank you for booking with us! We've received your inspection request
      for your <strong>{escape(booking.get("vehicle", ""))}</strong>.
    </mj-text>
    {_detail_rows(_summary_rows(booking))}
    <mj-text padding="0 0 16px 0">
      To secure your slot, please complete payment using the link below. We'll confirm
      the inspector and exact time once payment is received.
    </mj-text>
    """
    return get_base_template(
        title="Booking Confirmation",
        preview_text=f"Your {escape(booking.get('package_name') or 'inspection')} booking is received",
        content_sections=content,
        cta_url=payment_url,
        cta_label="Complete Payment",
    )


def booking_confirmation_text(booking: dict, payment_url: str) -> str:
    return (
        f"Hi {booking.get('name', '')},\n\n"
        f"Thank you for booking with us! We've received your inspection request for your "
        f"{booking.get('vehicle', '')}.\n\n"
        f"{_text_rows(_summary_rows(booking))}\n\n"
        f"To secure your slot, please complete payment here: {payment_url}\n\n"
        f"{BRAND_NAME}"
    )


def _admin_rows(booking: dict) -> list[tuple[str, str]]:
    fields = [
        ("Reference", "booking_reference"),
        ("Name", "name"),
        ("Email", "email"),
        ("Phone", "phone"),
        ("Alternate phone", "alternatePhone"),
        ("Vehicle", "vehicle"),
        ("Color", "carColor"),
        ("VIN", "vin"),
        ("License plate", "licensePlate"),
        ("Mileage", "mileage"),
        ("Fuel type", "fuelType"),
        ("Transmission", "transmission"),
        ("Package", "package_name"),
        ("Date", "date"),
        ("Time preference", "timePreference"),
        ("Address", "address"),
        ("City", "city"),
        ("State", "state"),
        ("ZIP", "zipCode"),
        ("Purpose", "inspectionPurpose"),
        ("Concerns", "specificConcerns"),
        ("Previous accidents", "previousAccidents"),
        ("Maintenance history", "maintenanceHistory"),
        ("Special requests", "specialRequests"),
        ("Preferred inspector", "preferredInspector"),
        ("Emergency contact", "emergencyContact"),
        ("Emergency phone", "emergencyPhone"),
        ("Payment status", "paymentStatus"),
        ("Form ID", "formId"),
    ]
    return [(label, str(booking.get(key, "") or "")) for label, key in fields]


def admin_booking_alert_template(booking: dict, spreadsheet_url: Optional[str]) -> str:
    """Internal alert with the full booking"""
    content = f"""
    <mj-text padding="0 0 16px 0">
      <strong>{escape(booking.get("name", ""))}</strong> booked a
      {escape(booking.get("package_name", ""))} for a {escape(booking.get("vehicle", ""))}.
    </mj-text>
    {_detail_rows(_admin_rows(booking))}
    """
    return get_base_template(
        title="New Booking Received",
        preview_text=f"New booking from {escape(booking.get('name', ''))}",
        content_sections=content,
        cta_url=spreadsheet_url,
        cta_label="Open Bookings Sheet",
    )


def admin_booking_alert_text(booking: dict, spreadsheet_url: Optional[str]) -> str:
    text = f"New booking from {booking.get('name', '')} for a {booking.get('vehicle', '')}.\n\n"
    text += _text_rows(_admin_rows(booking))
    if spreadsheet_url:
        text += f"\n\nBookings sheet: {spreadsheet_url}"
    return text
