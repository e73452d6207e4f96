"""Booking domain schemas - Pydantic models for the intake API"""

import json
from typing import Optional

from pydantic import BaseModel, field_validator


class BookingSubmission(BaseModel):
    """
    Payload produced by the booking form.

    The server trusts what the form sends: every field is optional and a
    missing value is stored, written to the sheet and rendered in emails as
    an empty string. Extra keys from the form are kept.
    """

    # Personal Information
    name: str = ""
    email: str = ""
    phone: str = ""
    alternatePhone: str = ""

    # Vehicle Information
    carMake: str = ""
    carModel: str = ""
    carYear: str = ""
    carColor: str = ""
    mileage: str = ""
    vin: str = ""
    licensePlate: str = ""
    fuelType: str = ""
    transmission: str = ""

    # Inspection Details
    date: str = ""
    timePreference: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zipCode: str = ""
    packageType: str = ""

    # Purpose & Additional Info
    inspectionPurpose: str = ""
    specificConcerns: str = ""
    previousAccidents: str = ""
    maintenanceHistory: str = ""

    # Special Requirements
    specialRequests: str = ""
    preferredInspector: str = ""
    emergencyContact: str = ""
    emergencyPhone: str = ""

    # Added by the wizard on submit
    formId: str = ""
    package: str = ""

    paymentStatus: str = "pending"
    transactionId: str = ""

    class Config:
        extra = "allow"
        coerce_numbers_to_str = True

    @field_validator("*", mode="before")
    @classmethod
    def as_form_text(cls, v):
        """Store whatever JSON the form sent as text"""
        if v is None:
            return ""
        if isinstance(v, bool):
            return "true" if v else "false"
        if isinstance(v, (list, dict)):
            return json.dumps(v)
        return v

    @property
    def selected_package(self) -> str:
        return self.packageType or self.package

    @property
    def vehicle_description(self) -> str:
        return " ".join(part for part in (self.carYear, self.carMake, self.carModel) if part)


class IntakeResponse(BaseModel):
    message: str
    bookingReference: Optional[str] = None
    steps: dict[str, str]
