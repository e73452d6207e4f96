"""Booking repository - named persistence operations on top of the gateway"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy import func, literal, or_, select
from sqlalchemy.orm import Session

from ...gateway import GatewayResult, PersistenceGateway
from ...models import Booking, Customer, InspectionPackage, User, Vehicle, generate_booking_reference
from .schemas import BookingSubmission

logger = logging.getLogger(__name__)

customer_name = (
    func.coalesce(User.first_name, literal("")) + literal(" ") + func.coalesce(User.last_name, literal(""))
)
vehicle_info = (
    func.coalesce(Vehicle.year, literal(""))
    + literal(" ")
    + func.coalesce(Vehicle.make, literal(""))
    + literal(" ")
    + func.coalesce(Vehicle.model, literal(""))
)


def booking_summary_query():
    """Flattened booking row used by listings, the dashboard and exports"""
    return (
        select(
            Booking.id,
            Booking.booking_reference,
            customer_name.label("customer_name"),
            User.email.label("customer_email"),
            User.phone.label("customer_phone"),
            vehicle_info.label("vehicle_info"),
            InspectionPackage.name.label("package_name"),
            Booking.inspection_date,
            Booking.time_preference,
            Booking.status,
            Booking.payment_status,
            Booking.total_amount,
            Booking.created_at,
        )
        .select_from(Booking)
        .join(Customer, Booking.customer_id == Customer.id)
        .join(User, Customer.user_id == User.id)
        .join(Vehicle, Booking.vehicle_id == Vehicle.id)
        .outerjoin(InspectionPackage, Booking.package_id == InspectionPackage.id)
    )


def search_condition(search: str):
    term = f"%{search}%"
    return or_(
        customer_name.like(term),
        User.email.like(term),
        Booking.booking_reference.like(term),
    )


def split_name(full_name: str) -> tuple[str, str]:
    parts = (full_name or "").strip().split(maxsplit=1)
    if not parts:
        return "", ""
    return parts[0], parts[1] if len(parts) > 1 else ""


def parse_inspection_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value) if value else None
    except ValueError:
        logger.warning(f"Unparseable inspection date {value!r}; storing without a date")
        return None


class BookingRepository:
    """Repository for booking database operations"""

    def __init__(self, db: Session):
        self.gateway = PersistenceGateway(db)

    # Lookups
    def find_user_by_email(self, email: str) -> GatewayResult:
        return self.gateway.find_one(select(User.id, User.email).where(User.email == email))

    def find_vehicle_by_vin(self, vin: str) -> GatewayResult:
        return self.gateway.find_one(select(Vehicle.id, Vehicle.vin).where(Vehicle.vin == vin))

    def find_package_by_code(self, code: str) -> GatewayResult:
        return self.gateway.find_one(
            select(InspectionPackage.id, InspectionPackage.name, InspectionPackage.price).where(
                InspectionPackage.code == code, InspectionPackage.is_active.is_(True)
            )
        )

    def find_booking_by_reference(self, reference: str) -> GatewayResult:
        """Booking columns plus customer, vehicle and package display fields"""
        stmt = (
            select(
                *Booking.__table__.columns,
                customer_name.label("customer_name"),
                User.email.label("customer_email"),
                User.phone.label("customer_phone"),
                vehicle_info.label("vehicle_info"),
                Vehicle.vin.label("vin"),
                Vehicle.license_plate.label("license_plate"),
                InspectionPackage.name.label("package_name"),
            )
            .select_from(Booking)
            .join(Customer, Booking.customer_id == Customer.id)
            .join(User, Customer.user_id == User.id)
            .join(Vehicle, Booking.vehicle_id == Vehicle.id)
            .outerjoin(InspectionPackage, Booking.package_id == InspectionPackage.id)
            .where(Booking.booking_reference == reference)
        )
        return self.gateway.find_one(stmt)

    # Writes
    def _ensure_user(self, submission: BookingSubmission) -> GatewayResult:
        existing = self.find_user_by_email(submission.email)
        if existing.success:
            return GatewayResult(success=True, insert_id=existing.data["id"])
        if existing.error:
            return existing
        first_name, last_name = split_name(submission.name)
        return self.gateway.insert_record(
            "users",
            {
                "first_name": first_name,
                "last_name": last_name,
                "email": submission.email,
                "phone": submission.phone,
            },
        )

    def _ensure_vehicle(self, submission: BookingSubmission, customer_id: int) -> GatewayResult:
        if submission.vin:
            existing = self.find_vehicle_by_vin(submission.vin)
            if existing.success:
                return GatewayResult(success=True, insert_id=existing.data["id"])
            if existing.error:
                return existing
        return self.gateway.insert_record(
            "vehicles",
            {
                "customer_id": customer_id,
                "make": submission.carMake,
                "model": submission.carModel,
                "year": submission.carYear,
                "color": submission.carColor,
                "vin": submission.vin or None,
                "license_plate": submission.licensePlate,
                "mileage": submission.mileage,
                "fuel_type": submission.fuelType,
                "transmission": submission.transmission,
            },
        )

    def create_booking(self, submission: BookingSubmission, total_amount: float) -> GatewayResult:
        """
        Persist a submission as user/customer/vehicle/booking rows.

        Users are reused by email and vehicles by VIN. Each insert commits on
        its own, so a failure part-way leaves the earlier rows in place.
        On success ``data`` holds the booking id and reference.
        """
        user = self._ensure_user(submission)
        if not user.success:
            return user

        customer = self.gateway.insert_record(
            "customers",
            {
                "user_id": user.insert_id,
                "address": submission.address,
                "city": submission.city,
                "state": submission.state,
                "zip_code": submission.zipCode,
                "alternate_phone": submission.alternatePhone,
                "emergency_contact": submission.emergencyContact,
                "emergency_phone": submission.emergencyPhone,
            },
        )
        if not customer.success:
            return customer

        vehicle = self._ensure_vehicle(submission, customer.insert_id)
        if not vehicle.success:
            return vehicle

        package = self.find_package_by_code(submission.selected_package)
        package_id = package.data["id"] if package.success else None

        reference = generate_booking_reference()
        booking = self.gateway.insert_record(
            "bookings",
            {
                "booking_reference": reference,
                "form_id": submission.formId or None,
                "customer_id": customer.insert_id,
                "vehicle_id": vehicle.insert_id,
                "package_id": package_id,
                "inspection_date": parse_inspection_date(submission.date),
                "time_preference": submission.timePreference,
                "address": submission.address,
                "city": submission.city,
                "state": submission.state,
                "zip_code": submission.zipCode,
                "inspection_purpose": submission.inspectionPurpose,
                "specific_concerns": submission.specificConcerns,
                "previous_accidents": submission.previousAccidents,
                "maintenance_history": submission.maintenanceHistory,
                "special_requests": submission.specialRequests,
                "preferred_inspector": submission.preferredInspector,
                "status": "pending",
                "payment_status": "pending",
                "total_amount": total_amount,
                "transaction_id": submission.transactionId or None,
            },
        )
        if not booking.success:
            return booking

        logger.info(f"📥 Booking {reference} stored (id={booking.insert_id})")
        return GatewayResult(
            success=True,
            insert_id=booking.insert_id,
            data={"id": booking.insert_id, "booking_reference": reference},
        )
