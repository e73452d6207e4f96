import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .database import Base

BOOKING_STATUSES = ("pending", "confirmed", "assigned", "in-progress", "completed", "cancelled")
PAYMENT_STATUSES = ("pending", "paid", "failed", "refunded")


def utcnow() -> datetime:
    """Naive UTC timestamp; every stored and compared time uses this clock"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_booking_reference():
    """Short human-friendly reference quoted to customers, e.g. AC3F9A1B2C"""
    return f"AC{uuid.uuid4().hex[:8].upper()}"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50), nullable=True)
    role = Column(String(20), default="customer", nullable=False)  # customer, admin, inspector
    created_at = Column(DateTime, default=utcnow)

    customers = relationship("Customer", back_populates="user")


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    zip_code = Column(String(20), nullable=True)
    alternate_phone = Column(String(50), nullable=True)
    emergency_contact = Column(String(255), nullable=True)
    emergency_phone = Column(String(50), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    user = relationship("User", back_populates="customers")
    vehicles = relationship("Vehicle", back_populates="customer")
    bookings = relationship("Booking", back_populates="customer")


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    make = Column(String(100), nullable=True)
    model = Column(String(100), nullable=True)
    year = Column(String(10), nullable=True)  # Kept as entered on the form
    color = Column(String(50), nullable=True)
    vin = Column(String(64), unique=True, index=True, nullable=True)
    license_plate = Column(String(32), nullable=True)
    mileage = Column(String(32), nullable=True)
    fuel_type = Column(String(20), nullable=True)  # gasoline, diesel, hybrid, electric, other
    transmission = Column(String(20), nullable=True)  # automatic, manual, cvt
    created_at = Column(DateTime, default=utcnow)

    customer = relationship("Customer", back_populates="vehicles")


class InspectionPackage(Base):
    __tablename__ = "inspection_packages"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(20), unique=True, index=True, nullable=False)  # basic, standard, premium
    name = Column(String(100), nullable=False)
    price = Column(Float, nullable=False)
    original_price = Column(Float, nullable=True)
    description = Column(Text, nullable=True)
    duration = Column(String(50), nullable=True)
    features = Column(JSON, default=list, nullable=True)
    popular = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    booking_reference = Column(
        String(20), unique=True, index=True, nullable=False, default=generate_booking_reference
    )
    form_id = Column(String(64), nullable=True)  # Client-generated FORM-<ms>-<n>
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    package_id = Column(Integer, ForeignKey("inspection_packages.id"), nullable=True)
    inspection_date = Column(Date, nullable=True)
    time_preference = Column(String(20), nullable=True)  # morning, afternoon, evening, flexible
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    zip_code = Column(String(20), nullable=True)
    inspection_purpose = Column(String(50), nullable=True)
    specific_concerns = Column(Text, nullable=True)
    previous_accidents = Column(String(10), nullable=True)  # yes, no, unknown
    maintenance_history = Column(String(20), nullable=True)  # regular, irregular, unknown
    special_requests = Column(Text, nullable=True)
    preferred_inspector = Column(String(100), nullable=True)
    status = Column(String(20), default="pending", nullable=False, index=True)
    payment_status = Column(String(20), default="pending", nullable=False, index=True)
    total_amount = Column(Float, default=0, nullable=False)
    transaction_id = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    customer = relationship("Customer", back_populates="bookings")
    vehicle = relationship("Vehicle")
    package = relationship("InspectionPackage")
    payments = relationship("Payment", back_populates="booking")


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    method = Column(String(20), default="paypal", nullable=False)
    status = Column(String(20), default="pending", nullable=False)  # pending, completed, failed
    transaction_id = Column(String(100), nullable=True)
    payment_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    booking = relationship("Booking", back_populates="payments")
