from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from app.domain.admin.service import group_revenue, period_key, revenue_cutoff, rows_to_csv
from app.gateway import PersistenceGateway
from app.models import Booking, Payment, utcnow


@pytest.fixture
def gateway(db_session):
    return PersistenceGateway(db_session)


def test_dashboard(client, make_booking):
    first = make_booking(packageType="premium", total_amount=150)
    second = make_booking(packageType="basic", total_amount=45)
    make_booking(packageType="standard", total_amount=85)
    client.put(f"/admin/bookings/{first['id']}/payment", json={"paymentStatus": "paid"})
    client.put(f"/admin/bookings/{second['id']}/status", json={"status": "completed"})

    response = client.get("/admin/dashboard")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    stats = body["data"]
    assert stats["totalBookings"] == 3
    assert stats["totalRevenue"] == 150
    assert stats["monthlyRevenue"] == 150
    assert stats["completedBookings"] == 1
    assert stats["pendingBookings"] == 2
    assert len(stats["recentBookings"]) == 3


def test_dashboard_on_empty_database(client):
    stats = client.get("/admin/dashboard").json()["data"]

    assert stats["totalBookings"] == 0
    assert stats["totalRevenue"] == 0
    assert stats["recentBookings"] == []


def test_bookings_are_paginated(client, make_booking):
    for _ in range(25):
        make_booking()

    response = client.get("/admin/bookings", params={"page": 2, "limit": 20})

    assert response.status_code == 200
    body = response.json()
    assert len(body["data"]) == 5
    assert body["pagination"] == {"page": 2, "limit": 20, "total": 25}
    # Newest first, so the second page holds the oldest bookings
    assert {row["id"] for row in body["data"]} == {1, 2, 3, 4, 5}


def test_booking_rows_are_flattened(client, make_booking):
    booking = make_booking()

    row = client.get("/admin/bookings").json()["data"][0]

    assert row["booking_reference"] == booking["booking_reference"]
    assert row["customer_name"] == "Jane Doe"
    assert row["customer_email"] == "customer1@example.com"
    assert row["vehicle_info"] == "2018 Toyota Corolla"
    assert row["package_name"] == "Premium Inspection"
    assert row["status"] == "pending"


def test_bookings_filtered_by_status(client, make_booking):
    booking = make_booking()
    make_booking()
    client.put(f"/admin/bookings/{booking['id']}/status", json={"status": "completed"})

    completed = client.get("/admin/bookings", params={"status": "completed"}).json()
    everything = client.get("/admin/bookings", params={"status": "all"}).json()

    assert [row["id"] for row in completed["data"]] == [booking["id"]]
    assert completed["pagination"]["total"] == 1
    assert everything["pagination"]["total"] == 2


def test_bookings_searched_by_email_name_or_reference(client, make_booking):
    target = make_booking(name="Sam Smith")
    make_booking()

    by_name = client.get("/admin/bookings", params={"search": "Smith"}).json()["data"]
    by_email = client.get("/admin/bookings", params={"search": "customer1@"}).json()["data"]
    by_reference = client.get("/admin/bookings", params={"search": target["booking_reference"]}).json()["data"]

    assert [row["id"] for row in by_name] == [target["id"]]
    assert [row["id"] for row in by_email] == [target["id"]]
    assert [row["id"] for row in by_reference] == [target["id"]]


@pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 101}])
def test_bad_pagination_is_rejected(client, params):
    assert client.get("/admin/bookings", params=params).status_code == 422


def test_booking_details(client, make_booking):
    booking = make_booking(licensePlate="XYZ987")

    response = client.get(f"/admin/bookings/{booking['booking_reference']}")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == booking["id"]
    assert data["customer_name"] == "Jane Doe"
    assert data["license_plate"] == "XYZ987"
    assert data["vin"] == "VIN00000000000001"
    assert data["inspection_date"] == "2026-11-02"
    assert data["total_amount"] == 150


def test_booking_not_found(client):
    response = client.get("/admin/bookings/AC00000000")

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Booking not found"}


def test_update_status(client, make_booking):
    booking = make_booking()

    response = client.put(f"/admin/bookings/{booking['id']}/status", json={"status": "in-progress"})

    assert response.status_code == 200
    assert response.json()["success"] is True
    details = client.get(f"/admin/bookings/{booking['booking_reference']}").json()["data"]
    assert details["status"] == "in-progress"


@pytest.mark.parametrize("body", [{"status": "done"}, {"status": "Completed"}, {}])
def test_invalid_status(client, make_booking, body):
    booking = make_booking()

    response = client.put(f"/admin/bookings/{booking['id']}/status", json=body)

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid status"}


def test_mark_paid_records_payment(client, make_booking, db_session):
    booking = make_booking(total_amount=85)

    response = client.put(
        f"/admin/bookings/{booking['id']}/payment",
        json={"paymentStatus": "paid", "transactionId": "PAYID-123"},
    )

    assert response.status_code == 200
    details = client.get(f"/admin/bookings/{booking['booking_reference']}").json()["data"]
    assert details["payment_status"] == "paid"
    assert details["transaction_id"] == "PAYID-123"
    payment = db_session.execute(select(Payment)).scalar_one()
    assert payment.booking_id == booking["id"]
    assert payment.amount == 85
    assert payment.status == "completed"


def test_failed_payment_does_not_record_payment(client, make_booking, db_session):
    booking = make_booking()

    response = client.put(f"/admin/bookings/{booking['id']}/payment", json={"paymentStatus": "failed"})

    assert response.status_code == 200
    assert db_session.execute(select(Payment)).first() is None


def test_invalid_payment_status(client, make_booking):
    booking = make_booking()

    response = client.put(f"/admin/bookings/{booking['id']}/payment", json={"paymentStatus": "settled"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid payment status"}


def test_revenue_analytics(client, make_booking, gateway):
    paid = make_booking(total_amount=150)
    also_paid = make_booking(total_amount=45)
    make_booking(total_amount=85)
    gateway.update_record(
        "bookings", {"payment_status": "paid", "created_at": datetime(2026, 9, 14, 10)}, {"id": paid["id"]}
    )
    gateway.update_record(
        "bookings", {"payment_status": "paid", "created_at": datetime(2026, 9, 15, 10)}, {"id": also_paid["id"]}
    )

    response = client.get("/admin/analytics/revenue", params={"period": "year"})

    assert response.status_code == 200
    assert response.json()["data"] == [{"period": "2026", "revenue": 195, "bookings": 2}]


def test_revenue_analytics_defaults_to_month(client):
    response = client.get("/admin/analytics/revenue")

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": []}


def test_unknown_revenue_period_groups_by_year(client, make_booking, gateway):
    paid = make_booking(total_amount=150)
    gateway.update_record(
        "bookings", {"payment_status": "paid", "created_at": datetime(2024, 5, 1, 9)}, {"id": paid["id"]}
    )

    response = client.get("/admin/analytics/revenue", params={"period": "quarter"})

    assert response.status_code == 200
    assert response.json()["data"] == [{"period": "2024", "revenue": 150, "bookings": 1}]


def test_recent_paid_booking_counts_toward_daily_revenue(client, make_booking):
    booking = make_booking(total_amount=45)
    client.put(f"/admin/bookings/{booking['id']}/payment", json={"paymentStatus": "paid"})

    data = client.get("/admin/analytics/revenue", params={"period": "day"}).json()["data"]

    assert data == [{"period": utcnow().strftime("%Y-%m-%d"), "revenue": 45, "bookings": 1}]


def test_booking_timestamps_use_utc(make_booking, db_session):
    booking = make_booking()

    created_at = db_session.execute(select(Booking.created_at).where(Booking.id == booking["id"])).scalar_one()

    assert created_at.tzinfo is None
    assert abs(utcnow() - created_at) < timedelta(minutes=1)


def test_utcnow_is_naive_utc():
    now = utcnow()

    assert now.tzinfo is None
    assert abs(datetime.now(timezone.utc).replace(tzinfo=None) - now) < timedelta(seconds=5)


def test_export_json(client, make_booking):
    make_booking()
    make_booking()

    response = client.get("/admin/export/bookings")

    assert response.status_code == 200
    assert len(response.json()["data"]) == 2


def test_export_csv(client, make_booking):
    make_booking(name='Jane "JD" Doe')

    response = client.get("/admin/export/bookings", params={"format": "csv"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.headers["content-disposition"] == "attachment; filename=bookings.csv"
    header, row = response.text.split("\n")
    assert header.startswith("id,booking_reference,customer_name,customer_email")
    assert '"Jane ""JD"" Doe"' in row


def test_export_csv_without_bookings(client):
    response = client.get("/admin/export/bookings", params={"format": "csv"})

    assert response.status_code == 200
    assert response.text == ""


def test_rows_to_csv_quoting():
    rows = [
        {"name": "Doe, Jane", "note": 'said "hi"'},
        {"name": "line\nbreak", "note": None},
    ]

    assert rows_to_csv(rows) == 'name,note\n"Doe, Jane","said ""hi"""\n"line\nbreak",'


def test_revenue_cutoff():
    now = datetime(2026, 3, 31, 15, 30)

    assert revenue_cutoff("day", now) == datetime(2026, 3, 1)
    assert revenue_cutoff("week", now) == datetime(2026, 1, 6)
    assert revenue_cutoff("month", now) == datetime(2025, 3, 31)
    assert revenue_cutoff("year", now) is None


@pytest.mark.parametrize(
    "period,expected",
    [("day", "2026-01-01"), ("week", "2026-W01"), ("month", "2026-01"), ("year", "2026")],
)
def test_period_key(period, expected):
    assert period_key(period, datetime(2026, 1, 1)) == expected


def test_group_revenue_is_newest_first():
    rows = [
        {"created_at": datetime(2026, 8, 3), "total_amount": 45},
        {"created_at": datetime(2026, 9, 1), "total_amount": 150},
        {"created_at": datetime(2026, 9, 20), "total_amount": 85.5},
        {"created_at": None, "total_amount": 999},
    ]

    points = group_revenue(rows, "month")

    assert [(p.period, p.revenue, p.bookings) for p in points] == [
        ("2026-09", 235.5, 2),
        ("2026-08", 45, 1),
    ]
