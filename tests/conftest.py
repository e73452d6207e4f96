import os

# Must be set before the app modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SPREADSHEET_ID"] = ""
os.environ["SPREADSHEET_API"] = ""
os.environ["BOOKINGS_DB_ENABLED"] = "true"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401
from app.database import Base, get_db
from app.domain.bookings.repository import BookingRepository
from app.domain.bookings.router import get_notifier, get_sheets_appender
from app.domain.bookings.schemas import BookingSubmission
from app.domain.bookings.store import booking_store
from app.domain.packages.catalogue import seed_packages
from app.email_service import EmailDeliveryError
from app.main import app
from app.services.sheets_service import SpreadsheetError, booking_to_row


class FakeSheetsAppender:
    def __init__(self):
        self.rows = []
        self.fail = False

    async def append_booking(self, booking):
        if self.fail:
            raise SpreadsheetError("Append failed with status 500")
        self.rows.append(booking_to_row(booking))
        return {"updates": {"updatedRows": 1}}


class FakeNotifier:
    def __init__(self):
        self.sent = []
        self.fail_customer = False
        self.fail_admin = False

    async def send_customer_confirmation(self, booking):
        if self.fail_customer:
            raise EmailDeliveryError("SMTP failed: connection refused")
        self.sent.append(("customer", booking))
        return {"transport": "fake"}

    async def send_admin_alert(self, booking):
        if self.fail_admin:
            raise EmailDeliveryError("SMTP failed: connection refused")
        self.sent.append(("admin", booking))
        return {"transport": "fake"}


def booking_payload(**overrides):
    payload = {
        "name": "Jane Doe",
        "email": "a@b.com",
        "phone": "555-0100",
        "carMake": "Toyota",
        "carModel": "Corolla",
        "carYear": "2018",
        "carColor": "Blue",
        "mileage": "42000",
        "vin": "JTDBR32E520012345",
        "licensePlate": "ABC123",
        "fuelType": "gasoline",
        "transmission": "automatic",
        "date": "2026-11-02",
        "timePreference": "morning",
        "address": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "zipCode": "62701",
        "packageType": "premium",
        "inspectionPurpose": "pre-purchase",
        "previousAccidents": "no",
        "maintenanceHistory": "regular",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = factory()
    try:
        seed_packages(db)
    finally:
        db.close()
    return factory


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def make_payload():
    return booking_payload


@pytest.fixture
def sheets():
    return FakeSheetsAppender()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture(autouse=True)
def clear_booking_store():
    booking_store.clear()
    yield
    booking_store.clear()


@pytest.fixture
def client(session_factory, sheets, notifier):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_sheets_appender] = lambda: sheets
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_booking(db_session):
    """Store a booking directly; returns {"id", "booking_reference"}"""
    repository = BookingRepository(db_session)
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        n = counter["n"]
        total_amount = overrides.pop("total_amount", 150)
        fields = booking_payload(email=f"customer{n}@example.com", vin=f"VIN{n:014d}")
        fields.update(overrides)
        submission = BookingSubmission(**fields)
        result = repository.create_booking(submission, total_amount=total_amount)
        assert result.success, result.error
        return result.data

    return _make
