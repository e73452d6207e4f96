"""
Four-step booking form state.

Steps: 1 Personal Info, 2 Vehicle Details, 3 Inspection Details,
4 Additional Info. Moving forward requires the current step to validate;
moving back is always allowed. Submitting is only possible from step 4 and
hands the composed payload to the booking API, after which the form waits
for payment.
"""

import random
import time
from typing import Optional

from ...shared.validators import is_valid_email
from ..packages.catalogue import PACKAGE_IDS
from .client import BookingApiClient

STEP_TITLES = {
    1: "Personal Info",
    2: "Vehicle Details",
    3: "Inspection Details",
    4: "Additional Info",
}
FIRST_STEP = 1
LAST_STEP = 4

# (field, message) pairs checked when leaving each step
REQUIRED_FIELDS = {
    1: [
        ("name", "Full name is required"),
        ("email", "Email is required"),
        ("phone", "Phone number is required"),
    ],
    2: [
        ("carMake", "Car make is required"),
        ("carModel", "Car model is required"),
        ("carYear", "Car year is required"),
        ("carColor", "Car color is required"),
        ("mileage", "Mileage is required"),
        ("vin", "VIN is required"),
        ("licensePlate", "License plate is required"),
    ],
    3: [
        ("date", "Inspection date is required"),
        ("address", "Address is required"),
        ("city", "City is required"),
        ("state", "State is required"),
        ("zipCode", "ZIP code is required"),
    ],
    4: [],
}


def initial_form(selected_package: str) -> dict:
    return {
        "name": "",
        "email": "",
        "phone": "",
        "alternatePhone": "",
        "carMake": "",
        "carModel": "",
        "carYear": "",
        "carColor": "",
        "mileage": "",
        "vin": "",
        "licensePlate": "",
        "fuelType": "gasoline",
        "transmission": "automatic",
        "date": "",
        "timePreference": "flexible",
        "address": "",
        "city": "",
        "state": "",
        "zipCode": "",
        "packageType": selected_package,
        "inspectionPurpose": "pre-purchase",
        "specificConcerns": "",
        "previousAccidents": "unknown",
        "maintenanceHistory": "unknown",
        "specialRequests": "",
        "preferredInspector": "",
        "emergencyContact": "",
        "emergencyPhone": "",
    }


def generate_form_id() -> str:
    return f"FORM-{int(time.time() * 1000)}-{random.randint(0, 9999)}"


class BookingWizard:
    def __init__(self, selected_package: str = "standard"):
        if selected_package not in PACKAGE_IDS:
            raise ValueError(f"Unknown package: {selected_package!r}")
        self.selected_package = selected_package
        self.current_step = FIRST_STEP
        self.form = initial_form(selected_package)
        self.errors: dict[str, str] = {}
        self.awaiting_payment = False
        self.acknowledgment: Optional[dict] = None

    @property
    def step_title(self) -> str:
        return STEP_TITLES[self.current_step]

    def select_package(self, package_id: str) -> None:
        if package_id not in PACKAGE_IDS:
            raise ValueError(f"Unknown package: {package_id!r}")
        self.selected_package = package_id
        self.form["packageType"] = package_id

    def update(self, **fields) -> None:
        """Set form fields, clearing any error shown for them"""
        for key, value in fields.items():
            if key not in self.form:
                raise KeyError(f"Unknown form field: {key}")
            self.form[key] = value
            self.errors.pop(key, None)

    def validate_step(self, step: Optional[int] = None) -> bool:
        step = self.current_step if step is None else step
        errors = {}
        for name, message in REQUIRED_FIELDS[step]:
            if not str(self.form.get(name) or "").strip():
                errors[name] = message
        if step == 1 and "email" not in errors and not is_valid_email(self.form["email"]):
            errors["email"] = "Invalid email format"
        self.errors = errors
        return not errors

    def next_step(self) -> bool:
        if self.current_step >= LAST_STEP or not self.validate_step():
            return False
        self.current_step += 1
        return True

    def prev_step(self) -> None:
        self.current_step = max(self.current_step - 1, FIRST_STEP)

    def build_payload(self) -> dict:
        return {**self.form, "formId": generate_form_id(), "package": self.selected_package}

    async def submit(self, client: BookingApiClient) -> Optional[dict]:
        """
        Send the booking from the last step. Returns the API acknowledgment,
        or None when the wizard is not on the last step or it fails validation.
        BookingSubmissionError from the client propagates and the wizard stays put.
        """
        if self.current_step != LAST_STEP or not self.validate_step():
            return None
        self.acknowledgment = await client.submit_booking(self.build_payload())
        self.awaiting_payment = True
        return self.acknowledgment
