"""Admin service - dashboard aggregates, booking management, analytics, export"""

import csv
import logging
from collections import defaultdict
from datetime import datetime, timedelta
from io import StringIO
from typing import Optional

from dateutil.relativedelta import relativedelta
from fastapi import HTTPException
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ...models import BOOKING_STATUSES, PAYMENT_STATUSES, utcnow
from ...shared.validators import is_one_of
from ..bookings.repository import BookingRepository
from .repository import AdminRepository
from .schemas import DashboardStats, Pagination, RevenuePoint

logger = logging.getLogger(__name__)

REVENUE_PERIODS = ("day", "week", "month", "year")


def revenue_cutoff(period: str, now: datetime) -> Optional[datetime]:
    """Start of the reporting window: 30 days, 12 weeks, 12 months, or all time"""
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "day":
        return today - timedelta(days=30)
    if period == "week":
        return today - timedelta(weeks=12)
    if period == "month":
        return today - relativedelta(months=12)
    return None


def period_key(period: str, when: datetime) -> str:
    if period == "day":
        return when.strftime("%Y-%m-%d")
    if period == "week":
        iso_year, iso_week, _ = when.isocalendar()
        return f"{iso_year}-W{iso_week:02d}"
    if period == "month":
        return when.strftime("%Y-%m")
    return when.strftime("%Y")


def group_revenue(rows: list[dict], period: str) -> list[RevenuePoint]:
    """Sum paid amounts per period, newest period first"""
    revenue = defaultdict(float)
    counts = defaultdict(int)
    for row in rows:
        created_at = row.get("created_at")
        if created_at is None:
            continue
        key = period_key(period, created_at)
        revenue[key] += float(row.get("total_amount") or 0)
        counts[key] += 1
    return [
        RevenuePoint(period=key, revenue=round(revenue[key], 2), bookings=counts[key])
        for key in sorted(revenue, reverse=True)
    ]


def rows_to_csv(rows: list[dict]) -> str:
    """
    Header is the first row's keys in order. Fields with commas, quotes or
    line breaks are quoted and inner quotes doubled.
    """
    if not rows:
        return ""
    headers = list(rows[0].keys())
    output = StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([row.get(header) for header in headers])
    return output.getvalue().removesuffix("\n")


class AdminService:
    """Service layer for admin dashboard logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AdminRepository(db)
        self.bookings = BookingRepository(db)

    def get_dashboard(self, now: Optional[datetime] = None) -> DashboardStats:
        now = now or utcnow()
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        result = self.repo.dashboard_stats(month_start)
        if not result.success:
            logger.error(f"❌ Dashboard stats error: {result.error}")
            raise HTTPException(status_code=500, detail="Failed to fetch dashboard statistics")
        return DashboardStats(**result.data)

    def list_bookings(
        self,
        page: int,
        limit: int,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> tuple[list[dict], Pagination]:
        rows = self.repo.list_bookings(page, limit, status, search)
        total = self.repo.count_bookings(status, search)
        if not rows.success or not total.success:
            logger.error(f"❌ Get bookings error: {rows.error or total.error}")
            raise HTTPException(status_code=500, detail="Failed to fetch bookings")
        return rows.data, Pagination(page=page, limit=limit, total=total.data["count"])

    def get_booking(self, reference: str) -> dict:
        result = self.bookings.find_booking_by_reference(reference)
        if result.success and result.data:
            return result.data
        if result.error:
            logger.error(f"❌ Get booking error for {reference}: {result.error}")
            raise HTTPException(status_code=500, detail="Failed to fetch booking details")
        raise HTTPException(status_code=404, detail="Booking not found")

    def update_status(self, booking_id: int, status: Optional[str]) -> None:
        """Any listed status may follow any other"""
        if not is_one_of(status, BOOKING_STATUSES):
            raise HTTPException(status_code=400, detail="Invalid status")
        result = self.repo.update_status(booking_id, status)
        if not result.success:
            logger.error(f"❌ Update booking status error for {booking_id}: {result.error}")
            raise HTTPException(status_code=500, detail="Failed to update booking status")
        logger.info(f"🔄 Booking {booking_id} status -> {status} ({result.affected_rows} row(s))")

    def update_payment(self, booking_id: int, payment_status: Optional[str], transaction_id: Optional[str]) -> None:
        if not is_one_of(payment_status, PAYMENT_STATUSES):
            raise HTTPException(status_code=400, detail="Invalid payment status")
        result = self.repo.update_payment(booking_id, payment_status, transaction_id)
        if not result.success:
            logger.error(f"❌ Update payment status error for {booking_id}: {result.error}")
            raise HTTPException(status_code=500, detail="Failed to update payment status")
        logger.info(f"💳 Booking {booking_id} payment -> {payment_status}")

    def revenue_analytics(self, period: str, now: Optional[datetime] = None) -> list[RevenuePoint]:
        if period not in REVENUE_PERIODS:
            period = "year"
        now = now or utcnow()
        result = self.repo.paid_revenue_rows(revenue_cutoff(period, now))
        if not result.success:
            logger.error(f"❌ Revenue analytics error: {result.error}")
            raise HTTPException(status_code=500, detail="Failed to fetch revenue analytics")
        return group_revenue(result.data, period)

    def export_bookings(self, export_format: str):
        result = self.repo.all_booking_summaries()
        if not result.success:
            logger.error(f"❌ Export bookings error: {result.error}")
            raise HTTPException(status_code=500, detail="Failed to export bookings")

        if export_format == "csv":
            logger.info(f"📊 CSV export of {len(result.data)} bookings")
            return Response(
                content=rows_to_csv(result.data),
                media_type="text/csv",
                headers={
                    "Content-Disposition": "attachment; filename=bookings.csv",
                    "Cache-Control": "no-cache",
                },
            )
        return result.data
